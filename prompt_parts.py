from dataclasses import dataclass, replace

from errors import ValidationError

FIELDS = ("background", "subject", "pose", "camera")


@dataclass(frozen=True)
class PromptParts:
    """The four-part image prompt. The default instance is the empty state."""

    background: str = ""
    subject: str = ""
    pose: str = ""
    camera: str = ""

    @classmethod
    def from_dict(cls, data):
        return cls(**{name: str(data.get(name) or "") for name in FIELDS})

    def to_dict(self):
        return {name: getattr(self, name) for name in FIELDS}

    def with_field(self, name, value):
        if name not in FIELDS:
            raise ValidationError(f"Unknown prompt field: {name}")
        return replace(self, **{name: value})

    @property
    def has_subject(self):
        return bool(self.subject.strip())


def field_label(name):
    return name[:1].upper() + name[1:]
