import os

import uvicorn

from apiguard.core.app_factory import create_app

app = create_app()


def run() -> None:
    """Console entry point: serve the demo app with uvicorn."""
    uvicorn.run(
        "apiguard.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_config=None,
    )


if __name__ == "__main__":
    run()
