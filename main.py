"""Simple entrypoint to run the Dressing Room locally."""

import os

import uvicorn


def main() -> None:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("server.api:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
