"""Problem-detail error document returned for every failed request."""

from pydantic import BaseModel, ConfigDict

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"


class ProblemDetail(BaseModel):
    """Normalized error body: ``{status, title, detail, type?}``."""

    model_config = ConfigDict(frozen=True)

    status: int
    title: str
    detail: str
    type: str | None = None

    def to_body(self) -> dict[str, object]:
        """JSON-ready dict; ``type`` is omitted when unset."""
        return self.model_dump(exclude_none=True)
