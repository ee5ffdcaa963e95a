import os

from pydantic import BaseModel, Field


class WindowPosition(BaseModel):
    """Last known window geometry of a desktop client. -1 means 'never stored'."""

    left: int = -1
    top: int = -1
    width: int = -1
    height: int = -1
    maximized: bool = False

    def is_valid(self) -> bool:
        """True when the stored geometry can be applied to a window."""
        return self.left >= 0 and self.top >= 0 and self.width > 0 and self.height > 0


class ScanPreferences(BaseModel):
    """User preferences remembered between sessions. Never read by the scan core."""

    base_directory: str = Field(default_factory=os.getcwd)
    include_subdirectories: bool = True
    file_masks: str = Field(default="", description="Newline separated filename masks")
    window_position: WindowPosition = Field(default_factory=WindowPosition)
