"""Fields shared by every server command's output."""

from pydantic import BaseModel, Field


class BaseOutputSchema(BaseModel):
    """Output of a ``pgprefs server`` command.

    A failed action reports its reason in ``errors``; ``warnings`` carries
    problems that did not stop the command, such as a name that was already
    taken or a status that needs administrator authorization.
    """

    errors: list[str] = Field(default_factory=list, description="Why the command failed, empty on success")
    warnings: list[str] = Field(default_factory=list, description="Problems that did not stop the command")
