from typing import Any, Dict

import msgspec

from .log_level import LogLevel


class Entry(msgspec.Struct, kw_only=True):
    """
    Base log record. Subclasses add the context fields of one part of
    the node and pin ``level``.
    """

    message: str | None = None
    level: LogLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            field: getattr(self, field) for field in self.__struct_fields__
        }

    def render(self, template: str, **context: Any) -> str:
        fields = self.to_dict()
        fields["level"] = self.level.value
        fields.update(context)

        return template.format(**fields)
