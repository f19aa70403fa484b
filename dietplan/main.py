import logging

import uvicorn
from dietplan.api.api_run import app
from dietplan.utilities.config import APP_HOST, APP_PORT, LOG_LEVEL


if __name__ == "__main__":
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    local_url = f"http://localhost:{APP_PORT}"
    # Print a friendly message that points to the URL of the API docs
    print(f"Uvicorn running on {local_url} (Press CTRL+C to quit), docs at {local_url}/docs")
    uvicorn.run(app, host=APP_HOST, port=APP_PORT)
