from artdesk.utils.logger import get_logger

logger = get_logger("artdesk.notifications")


class Notifier:
    """
    Where user-facing success/failure messages go. The dashboard plugs in a
    toast sink; the default just logs.
    """

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)


def deny_all(message: str) -> bool:
    # default confirm hook: destructive actions need an explicit yes
    return False
