# src/nfc_page_tool_qt5/nfc/presence.py
# Tag arrival/removal dispatch: pyscard CardMonitor -> Qt signal on the GUI thread.
from PyQt5 import QtCore
from smartcard.CardMonitoring import CardMonitor, CardObserver


class QtPresenceBridge(QtCore.QObject):
    """Re-emits observer callbacks (pyscard monitor thread) as queued Qt signals."""
    tagArrived = QtCore.pyqtSignal()
    tagRemoved = QtCore.pyqtSignal()


class TagPresenceObserver(CardObserver):
    def __init__(self, bridge: QtPresenceBridge):
        super().__init__()
        self._bridge = bridge

    def update(self, observable, actions):
        """Called by pyscard with (added_cards, removed_cards)."""
        (added, removed) = actions
        if removed:
            self._bridge.tagRemoved.emit()
        if added:
            self._bridge.tagArrived.emit()


class PresenceDispatch:
    """
    Registers the observer while the window is active and removes it when it is
    not, so tag events only reach a visible window.
    """
    def __init__(self, bridge: QtPresenceBridge):
        self._bridge = bridge
        self._monitor = None
        self._observer = None

    @property
    def active(self) -> bool:
        return self._observer is not None

    def enable(self):
        if self.active:
            return
        self._monitor = CardMonitor()
        self._observer = TagPresenceObserver(self._bridge)
        self._monitor.addObserver(self._observer)

    def disable(self):
        if not self.active:
            return
        try:
            self._monitor.deleteObserver(self._observer)
        finally:
            self._monitor = None
            self._observer = None
