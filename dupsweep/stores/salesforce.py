from typing import Any, Iterator, Sequence

from simple_salesforce import Salesforce, format_soql

from dupsweep.connections import SalesforceConnectionMixin
from dupsweep.core import (
    DEFAULT_PAGE_SIZE,
    ParentId,
    RecordId,
    RecordStore,
    RecordStoreError,
    SearchPage,
)

# CandidateRecord field -> Salesforce field. Dotted paths follow relationships.
DEFAULT_FIELD_MAP = {
    "id": "Id",
    "transaction_number": "Transaction_Number__c",
    "document_type": "Type__c",
    "record_type": "Record_Type__c",
    "transaction_date": "Transaction_Date__c",
    "date_created": "CreatedDate",
    "parent_id": "Created_From__c",
    "created_by": "CreatedBy.Name",
}


class SalesforceRecordStore(RecordStore, SalesforceConnectionMixin):
    """Record store backed by a Salesforce org.

    Descendant transactions are read from a single `entity` whose rows name the
    object they belong to in the `record_type` field; deletes go to that object
    (or to the object named in `delete_entities`).
    """

    def __init__(
        self,
        entity: str = "Transaction__c",
        field_map: dict[str, str] | None = None,
        parent_kind_field: str = "Created_From__r.Type__c",
        main_line_field: str | None = "Main_Line__c",
        delete_entities: dict[str, str] | None = None,
        username: str | None = None,
        password: str | None = None,
        security_token: str | None = None,
        domain: str | None = None,
        api_version: str | None = None,
        sf: Salesforce | None = None,
    ) -> None:
        """Initialize the `SalesforceRecordStore`.

        Args:
            entity (str, optional): Object holding descendant transactions. Defaults to "Transaction__c".
            field_map (dict[str, str], optional): Maps candidate fields to Salesforce fields. Defaults to `DEFAULT_FIELD_MAP`.
            parent_kind_field (str, optional): Field holding the kind of the parent document.
            main_line_field (str, optional): Boolean field marking main-line rows. No main-line filter when None.
            delete_entities (dict[str, str], optional): Maps a record type to the object its rows are deleted from. Defaults to the record type itself.
            username (str): Username.
            password (str): Password.
            security_token (str): Security token.
            domain (str): Domain.
            api_version (str, optional): Salesforce API version.
            sf (Salesforce, optional): Already authenticated connection.
        """
        SalesforceConnectionMixin.__init__(
            self,
            username=username,
            password=password,
            security_token=security_token,
            domain=domain,
            version=api_version,
            sf=sf,
        )
        self.entity = entity
        self.field_map = {**DEFAULT_FIELD_MAP, **(field_map or {})}
        for required in ("id", "record_type", "parent_id", "transaction_number"):
            if not self.field_map.get(required):
                raise ValueError(f"field_map must map '{required}'")
        self.parent_kind_field = parent_kind_field
        self.main_line_field = main_line_field
        self.delete_entities = delete_entities or {}

    def _prepare_soql(self, parent_ids: Sequence[ParentId], parent_kind: str) -> str:
        query = "SELECT {:literal} FROM {:literal} WHERE {:literal} IN {} AND {:literal} = {}"
        args: list[Any] = [
            ", ".join(dict.fromkeys(self.field_map.values())),
            self.entity,
            self.field_map["parent_id"],
            list(parent_ids),
            self.parent_kind_field,
            parent_kind,
        ]
        if self.main_line_field:
            query += " AND {:literal} = true"
            args.append(self.main_line_field)
        query += " ORDER BY {:literal} ASC"
        args.append(self.field_map["transaction_number"])
        return format_soql(query, *args)

    @staticmethod
    def _resolve(row: dict[str, Any], path: str) -> Any:
        value: Any = row
        for part in path.split("."):
            if not isinstance(value, dict):
                return None
            value = value.get(part)
        return value

    def _process_query_results(self, response: dict[str, Any]) -> SearchPage:
        return [
            {
                name: self._resolve(dict(row), sf_field)
                for name, sf_field in self.field_map.items()
            }
            for row in response["records"]
        ]

    def search(
        self,
        parent_ids: Sequence[ParentId],
        parent_kind: str,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Iterator[SearchPage]:
        if page_size < 1:
            raise ValueError("page_size must be greater than 0")
        headers = {"Sforce-Query-Options": f"batchSize={page_size}"}
        soql = self._prepare_soql(parent_ids, parent_kind)
        self.log.debug(f"SalesforceRecordStore: {soql}")
        response = self.sf.query(soql, headers=headers)
        while True:
            page = self._process_query_results(response)
            if page:
                yield page
            if response.get("done", True):
                break
            response = self.sf.query_more(
                response["nextRecordsUrl"], identifier_is_url=True, headers=headers
            )

    def delete(self, record_type: str, record_id: RecordId) -> None:
        entity = self.delete_entities.get(record_type, record_type)
        try:
            getattr(self.sf, entity).delete(str(record_id))
        except Exception as e:
            raise RecordStoreError(
                f"Salesforce rejected delete of {entity} {record_id}: {e}"
            ) from e
