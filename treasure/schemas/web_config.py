"""
Pydantic schemas for the treasure web config (config.json).

The admin frontend owns the shape of each treasure image entry; only
``clueName`` and ``fileName`` are read here and everything else is kept.
"""

from pydantic import BaseModel, ConfigDict, Field


class TreasureImage(BaseModel):
    """One treasure entry in the web config."""

    clue_name: str | None = Field(default=None, alias="clueName")
    file_name: str | None = Field(default=None, alias="fileName")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class StorylineSelection(BaseModel):
    """Storyline chosen by the hunt organiser."""

    selected_story: str = Field(default="", alias="selectedStory")
    story_title: str = Field(default="", alias="storyTitle")

    model_config = ConfigDict(populate_by_name=True)


class WebConfig(BaseModel):
    """Contents of config.json."""

    images: list[TreasureImage] = Field(default_factory=list)
    last_updated: str = Field(default="", alias="lastUpdated")
    total_treasures: int = Field(default=0, alias="totalTreasures")
    storyline: StorylineSelection | None = None

    model_config = ConfigDict(populate_by_name=True)


class WebConfigUpdate(BaseModel):
    """Body of POST /upload-web-config. The frontend sends the full state."""

    images: list[TreasureImage] | None = None
    last_updated: str | None = Field(default=None, alias="lastUpdated")
    total_treasures: int | None = Field(default=None, alias="totalTreasures")
    storyline: StorylineSelection | None = None

    model_config = ConfigDict(populate_by_name=True)


class DeleteImageRequest(BaseModel):
    """Body of POST /delete-image."""

    file_name: str | None = Field(default=None, alias="fileName")

    model_config = ConfigDict(populate_by_name=True)
