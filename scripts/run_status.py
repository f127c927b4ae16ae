from fleetscore.config import get_config
from fleetscore.data.memory import Memory

memory = Memory(get_config().db_url)

run = memory.runs.get_open_run()
if run is None:
    latest = memory.runs.latest()
    print("No open run.", f"Last run: {latest.model_dump()}" if latest else "No run history.")
else:
    print(f"Open run {run.id} started at {run.start_time}")
    print(f"Report: {run.report_location}")
    print(f"Processed: {memory.accounts.count_processed()}  Unprocessed: {memory.accounts.count_unprocessed()}")

print(f"Locked: {memory.locks.locked_resources() or 'nothing'}")
