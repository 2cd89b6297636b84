"""
Run the API with uvicorn: ``python -m rentalwheels``.
"""

import logging

import uvicorn

from rentalwheels.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Server is running on port: %d", settings.port)
    uvicorn.run("rentalwheels.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
