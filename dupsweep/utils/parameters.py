import abc
import os
from pathlib import Path

from dotenv import load_dotenv


def parse_parent_ids(raw: str | None) -> list[str]:
    """Split a newline separated parameter into unique parent IDs.

    Entries are trimmed, blank entries dropped and duplicates removed. First
    occurrence order is kept.
    """
    if not raw:
        return []
    ids = [line.strip() for line in raw.splitlines()]
    return list(dict.fromkeys(id_ for id_ in ids if id_))


class ParameterSource(abc.ABC):
    """Supplies the raw text of a job parameter."""

    @abc.abstractmethod
    def get(self) -> str | None:
        pass


class StaticParameter(ParameterSource):
    def __init__(self, value: str | list[str] | None) -> None:
        if isinstance(value, list):
            value = "\n".join(value)
        self.value = value

    def get(self) -> str | None:
        return self.value


class EnvironmentParameter(ParameterSource):
    """Reads the parameter from an environment variable, loading a `.env` file first."""

    def __init__(self, name: str, dotenv_path: str | Path | None = None) -> None:
        self.name = name
        self.dotenv_path = dotenv_path

    def get(self) -> str | None:
        load_dotenv(dotenv_path=self.dotenv_path)
        return os.getenv(self.name)


class FileParameter(ParameterSource):
    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding

    def get(self) -> str | None:
        return self.path.read_text(encoding=self.encoding)
