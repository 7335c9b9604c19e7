from .created import CreatedDateTimeMixin, utc_now  # noqa: F401
from .id import StringIDMixin, UUIDMixin  # noqa: F401
from .timestamp import TimestampMixin  # noqa: F401
from .updated import UpdatedDateTimeMixin  # noqa: F401
