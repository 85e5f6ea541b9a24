import socket

import uvicorn

from memolil import app
from memolil.config import settings


def pick_port() -> int:
    """The configured port, or a free one when MEMOLIL_PORT is 0."""
    if settings.port:
        return settings.port
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((settings.host, 0))
        return s.getsockname()[1]


if __name__ == "__main__":
    port = pick_port()
    # The desktop shell reads this line to find the API
    print(f"PORT={port}", flush=True)
    uvicorn.run(app, host=settings.host, port=port, log_level=settings.log_level)
