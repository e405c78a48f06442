"""Data models for jokes and published signing keys."""

import yaml
from pydantic import BaseModel, ConfigDict, Field


class BaseConfigModel(BaseModel):
    model_config = ConfigDict(use_attribute_docstrings=True)


class Joke(BaseConfigModel):
    """A joke and its like counter."""

    id: int
    """
    Identifier, unique among all served jokes
    """

    likes: int = Field(default=0, ge=0)
    """
    Number of times the joke was liked since startup
    """

    joke: str
    """
    Joke text
    """


class JokesFile(BaseConfigModel):
    """Jokes loaded from a YAML file."""

    jokes: list[Joke]
    """
    Jokes in the order they are served
    """

    @classmethod
    def from_yaml_file(cls, path: str) -> "JokesFile":
        """Load JokesFile from YAML file."""
        with open(path) as f:
            config_dict = yaml.safe_load(f)

        return cls.model_validate(config_dict)


class JSONWebKey(BaseModel):
    """Single key record of a JSON Web Key Set.

    https://datatracker.ietf.org/doc/html/rfc7517#section-4
    """

    kid: str | None = None
    kty: str | None = None
    use: str | None = None
    n: str | None = None
    e: str | None = None
    x5c: list[str] = Field(default_factory=list)


class JSONWebKeySet(BaseModel):
    """JSON Web Key Set as published at /.well-known/jwks.json."""

    keys: list[JSONWebKey]


class PingResponse(BaseModel):
    message: str = "pong"
