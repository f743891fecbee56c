import abc
from types import TracebackType
from typing import Type

from dupsweep.core.exceptions import ErrorHandlingMethod
from dupsweep.core.stage import Stage


class Source(Stage, metaclass=abc.ABCMeta):
    """Core `Source` base class. Produces the batch that enters the pipeline."""

    def __init__(
        self,
        name: str | None = None,
        error_handling_method: ErrorHandlingMethod = ErrorHandlingMethod.DEFAULT,
        expose_metrics: bool = False,
    ) -> None:
        """
        Initialize the `Source`. **This is a private method for subclass use. Subclasses should copy-paste this `__init__` documentation.**

        Args:
            name (str, optional): Stage name. Defaults to class name if name = None.
            error_handling_method (ErrorHandlingMethod, optional): Enum that represents how the stage would like the pipeline to handle errors which occur when running this stage. By default, errored records are sent to the pipeline's error handlers.
            expose_metrics (bool, optional): Whether or not to expose metrics for this source. Defaults to False.
        """
        Stage.__init__(
            self,
            name=name,
            processes=1,
            error_handling_method=error_handling_method,
            expose_metrics=expose_metrics,
        )

    @abc.abstractmethod
    def __enter__(self) -> None:
        """Anything that needs to be done when entering a source context (aka when the 'with' scope starts)"""
        pass

    @abc.abstractmethod
    def __exit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        """Anything that needs to be done when leaving a source context (aka when the 'with' scope ends)"""
        pass
