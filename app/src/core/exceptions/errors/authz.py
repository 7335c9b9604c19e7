from fastapi_problem.error import ForbiddenProblem


class AuthorizationError(ForbiddenProblem):
    """
    An base error indicating that authorization has failed.
    """

    type_ = "authorization_error"
    title = "Invalid Authorization"


class AdminRequiredError(AuthorizationError):
    """
    An error indicating that the operation is reserved to administrators.
    """

    type_ = "admin_required_error"
    title = "Administrator Access Required"
