"""Somali/English display-language switching."""
from __future__ import annotations

import logging

from kasmo.graph.labels import DisplayLanguage
from kasmo.ui.history import AddressBar, parse_fragment
from kasmo.ui.scene import RenderingLayer
from kasmo.ui.selection import SelectionController
from kasmo.ui.state import ExplorerState

LOGGER = logging.getLogger(__name__)


class LanguageToggle:
    """Flips the display language and refreshes every language-bound output."""

    def __init__(
        self,
        state: ExplorerState,
        scene: RenderingLayer,
        selection: SelectionController,
        address: AddressBar,
    ) -> None:
        self._state = state
        self._scene = scene
        self._selection = selection
        self._address = address

    def toggle(self) -> DisplayLanguage:
        self._state.language = self._state.language.other
        LOGGER.info("Display language switched to %s", self._state.language.value)
        self._scene.relabel()
        if self._state.current_id in self._state.graph:
            self._selection.select_id(self._state.current_id)
        else:
            self._selection.select_id(parse_fragment(self._address.hash))
        return self._state.language


__all__ = ["LanguageToggle"]
