# File: src/ecoride/main.py
"""
Main application entry point for EcoRide Car Rental System
Wires the rental core together and exposes the command handler
"""

from typing import Any, Dict, Optional
import logging
import sys
import os

from .application.rental_service import RentalService, RentalServiceFactory
from .application.commands import RentalCommandHandler


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Setup application logging configuration"""
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers
    )
    return logging.getLogger(__name__)


class RentalApplication:
    """Application controller that sets up all components"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.info("Starting EcoRide Car Rental System...")
        self.setup_components(config)

    def setup_components(self, config: Optional[Dict[str, Any]] = None):
        """Initialize all application components with dependency injection"""
        try:
            if config:
                self.service: RentalService = RentalServiceFactory.create_service_with_config(config)
            else:
                self.service = RentalServiceFactory.create_default_service()
            self.logger.info("Rental service initialized")

            self.command_handler = RentalCommandHandler(self.service)
            self.logger.info("Command handler initialized")

        except Exception as e:
            self.logger.error(f"Failed to initialize components: {str(e)}")
            raise

    def handle(self, command: Dict[str, Any]) -> Dict[str, Any]:
        return self.command_handler.handle(command)


def create_application(config: Optional[Dict[str, Any]] = None) -> RentalApplication:
    """Composition root used by callers and integration tests"""
    return RentalApplication(config)


def main(log_file: Optional[str] = None) -> int:
    """Main entry point: start the core and report its status

    Logs go to stdout, and also to log_file when one is given.
    """
    logger = setup_logging(log_file=log_file)
    try:
        app = create_application()
        status = app.service.get_system_status()
        print(status.to_json(indent=2))
    except Exception as e:
        logger.error(f"Fatal error in main: {str(e)}", exc_info=True)
        return 1
    finally:
        logger.info("Application shutting down...")
    return 0


if __name__ == "__main__":
    sys.exit(main())
