"""Session controllers: directory browser, upload and clipboard relay."""

from ezshare.controllers.browser import DirectoryBrowserController
from ezshare.controllers.clipboard import ClipboardRelayController
from ezshare.controllers.upload import UploadController

__all__ = ["ClipboardRelayController", "DirectoryBrowserController", "UploadController"]
