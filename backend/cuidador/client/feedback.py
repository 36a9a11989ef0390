"""User-facing feedback messages (toasts)."""

import enum
from dataclasses import dataclass


class ToastVariant(str, enum.Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str
    variant: ToastVariant = ToastVariant.DEFAULT


class ToastQueue:
    """Collects toasts until the presentation layer drains them."""

    def __init__(self):
        self._toasts: list[Toast] = []

    def show(self, title: str, description: str, variant: ToastVariant = ToastVariant.DEFAULT) -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        self._toasts.append(toast)
        return toast

    def error(self, title: str, description: str) -> Toast:
        return self.show(title, description, ToastVariant.DESTRUCTIVE)

    def drain(self) -> list[Toast]:
        """Return pending toasts and forget them."""
        toasts, self._toasts = self._toasts, []
        return toasts

    @property
    def pending(self) -> list[Toast]:
        return list(self._toasts)

    def __len__(self) -> int:
        return len(self._toasts)
