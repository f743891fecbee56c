import logging
import os

from dotenv import load_dotenv

from dupsweep import config
from dupsweep.config import RunMode
from dupsweep.jobs import run
from dupsweep.stores import SalesforceRecordStore
from dupsweep.utils.parameters import EnvironmentParameter

load_dotenv()
config.set_logging_level(logging.DEBUG)

store = SalesforceRecordStore(
    entity="Transaction__c",
    delete_entities={"itemreceipt": "Item_Receipt__c", "cashrefund": "Cash_Refund__c"},
    username=os.getenv("SF_USERNAME"),
    password=os.getenv("SF_PASSWORD"),
    security_token=os.getenv("SF_SECURITY_TOKEN"),
    domain=os.getenv("SF_DOMAIN", "login"),
)

if __name__ == "__main__":
    # newline separated list of return authorization IDs
    parent_ids = EnvironmentParameter("RAS_WITH_DUPLICATE_CHILDREN")
    if os.getenv("DUPSWEEP_WRITE") == "1":
        config.set_run_mode(RunMode.WRITE)
    summary = run(store, parent_ids, reduce_processes=4)
    print(summary.as_dict())
