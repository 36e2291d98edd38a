"""Small helpers shared by the list screens"""
import logging

from .exceptions import ClientError, user_message

logger = logging.getLogger(__name__)


class DeleteConfirmation:
    """
    Confirm-then-execute flow for deletes.

    request() opens the prompt, confirm() runs the action. A failed delete
    keeps the prompt open with the server's message in `error` instead of
    closing it.
    """

    def __init__(self, action):
        self.action = action
        self.target = None
        self.message = ''
        self.error = None
        self.is_open = False

    def request(self, target, message=None):
        self.target = target
        self.message = message or 'Are you sure? This action cannot be undone.'
        self.error = None
        self.is_open = True

    def confirm(self):
        if not self.is_open:
            return False
        try:
            self.action(self.target)
        except ClientError as e:
            logger.warning(f"Delete of {self.target!r} failed: {e}")
            self.error = user_message(e, 'Delete failed')
            return False
        self.cancel()
        return True

    def cancel(self):
        self.target = None
        self.message = ''
        self.error = None
        self.is_open = False
