"""In-memory joke store."""

import threading
from collections.abc import Iterable

from .models import Joke, JokesFile

DEFAULT_JOKES = [
    "Did you hear about the restaurant on the moon? Great food, no atmosphere.",
    "What do you call a fake noodle? An Impasta.",
    "How many apples grow on a tree? All of them.",
    "Want to hear a joke about paper? Nevermind it's tearable.",
    "I just watched a program about beavers. It was the best dam program I've ever seen.",
    "Why did the coffee file a police report? It got mugged.",
    "How does a penguin build it's house? Igloos it together.",
]


class JokeNotFoundError(Exception):
    """Raised when no joke has the requested id."""


class JokeStore:
    """Jokes held for the process lifetime.

    Like counters are only mutated under the store lock, so concurrent
    likes never lose an update.
    """

    def __init__(self, jokes: Iterable[Joke]):
        self._jokes = [joke.model_copy() for joke in jokes]
        self._lock = threading.Lock()

        seen: set[int] = set()
        for joke in self._jokes:
            if joke.id in seen:
                raise ValueError(f"Duplicate joke id {joke.id}")
            seen.add(joke.id)

    @classmethod
    def default(cls) -> "JokeStore":
        """Create store with the built-in jokes, numbered from 1."""
        return cls(
            Joke(id=i, joke=text) for i, text in enumerate(DEFAULT_JOKES, start=1)
        )

    @classmethod
    def from_yaml_file(cls, path: str) -> "JokeStore":
        """Create store from jokes YAML file."""
        return cls(JokesFile.from_yaml_file(path).jokes)

    def list_jokes(self) -> list[Joke]:
        """Return snapshot of all jokes in insertion order."""
        with self._lock:
            return self._snapshot()

    def like_joke(self, joke_id: int) -> list[Joke]:
        """Increment likes of joke and return snapshot of all jokes."""
        with self._lock:
            for joke in self._jokes:
                if joke.id == joke_id:
                    joke.likes += 1
                    return self._snapshot()

        raise JokeNotFoundError(f"No joke with id {joke_id}")

    def _snapshot(self) -> list[Joke]:
        return [joke.model_copy() for joke in self._jokes]
