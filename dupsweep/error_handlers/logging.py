from dupsweep.core import Record
from dupsweep.core.error_handler import BaseErrorHandler, ErrorHandlerFailureAction
from dupsweep.utils.log import LoggingMixin


class LoggingHandler(BaseErrorHandler, LoggingMixin):
    """This will log any records passed to it to the logging.ERROR"""

    def process_error_record(self, record: Record) -> None:
        """Send record to logging.ERROR.

        Args:
            record (Record): Record to be logged.

        """
        try:
            self.log.error(self.serialize(record.as_dict()))
        except Exception as ex:
            if self.failure_action == ErrorHandlerFailureAction.RAISE:
                raise ex
            if self.failure_action == ErrorHandlerFailureAction.LOG:
                self.log.error(
                    f"LoggingHandler could not serialize errored record {record.record_uuid}: {ex!r}"
                )
