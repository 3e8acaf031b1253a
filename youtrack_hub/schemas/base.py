from pydantic import BaseModel, ConfigDict


class YouTrackSchema(BaseModel):
    """Base for payloads read from the YouTrack REST API.

    Unknown keys are kept, and `$type` discriminators can be set either
    through their alias or through the Python field name.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)
