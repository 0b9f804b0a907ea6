from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class Event(BaseModel):
    """An event row from the 'events' table."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Union[int, str]
    title: str
    description: Optional[str] = None
    branch_id: Optional[Union[int, str]] = None  # FK to Branch.id
    images_folder: Optional[str] = None  # Folder under events/ in storage

    @property
    def storage_prefix(self) -> Optional[str]:
        """Storage folder holding this event's photos, or None if unset."""
        if not self.images_folder:
            return None
        return f"events/{self.images_folder.strip('/')}"
