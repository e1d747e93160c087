import asyncio
import os
import sys

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ekvi.core.logging import setup_logging
from ekvi.modules.videos.cleanup import run_abandoned_upload_cleanup

async def main():
    """
    Run one abandoned-upload sweep. For deployments that schedule the job
    externally (cron, k8s CronJob) with CLEANUP_ENABLED=false on the API.
    """
    setup_logging()
    result = await run_abandoned_upload_cleanup()
    print(f"Deleted {result['deleted_count']} abandoned video uploads")

if __name__ == "__main__":
    asyncio.run(main())
