"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, Toolbar, the sound file
list and the tile canvas.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (like File -> Save) to the canvas and
   the project I/O.
"""
import os
from typing import List, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QMainWindow, QSplitter, QListWidget, QListWidgetItem, QAbstractItemView,
    QFileDialog, QMessageBox, QInputDialog, QLabel, QProgressBar, QToolBar
)

from companion.config import DEFAULT_PROJECT_PATH, PROJECT_FILE_FILTER
from companion.model.catalog import SoundFileCatalog, SoundFileRecord
from companion.model.io import ProjectIO
from companion.tile.canvas import Canvas
from companion.tile.mime import SOUND_FILES_MIME_TYPE, encode_sound_files


VISIBLE_APP_NAME = "Companion"


class SoundFileList(QListWidget):
    """Catalog view; selected entries can be dragged onto playlist tiles."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        self.setDragEnabled(True)
        self.setDragDropMode(QAbstractItemView.DragDropMode.DragOnly)

    def set_records(self, records: List[SoundFileRecord]) -> None:
        self.clear()
        for rec in records:
            item = QListWidgetItem(rec.name)
            item.setData(Qt.ItemDataRole.UserRole, rec)
            item.setToolTip(rec.path)
            self.addItem(item)

    def mimeTypes(self) -> List[str]:
        return [SOUND_FILES_MIME_TYPE]

    def mimeData(self, items):
        return encode_sound_files(item.data(Qt.ItemDataRole.UserRole) for item in items)


class MainWindow(QMainWindow):
    def __init__(self, catalog: Optional[SoundFileCatalog] = None) -> None:
        super().__init__()
        self.catalog: SoundFileCatalog = catalog if catalog is not None else SoundFileCatalog()
        self.filepath: Optional[str] = None
        self.is_modified: bool = False

        self.resize(1400, 900)

        # --- CONTENT AREA ---
        splitter = QSplitter(Qt.Orientation.Horizontal)
        self.setCentralWidget(splitter)

        self.sound_list = SoundFileList()
        splitter.addWidget(self.sound_list)

        self.canvas = Canvas()
        self.canvas.set_sound_file_model(self.catalog)
        splitter.addWidget(self.canvas)
        splitter.setSizes([300, 1100])

        # --- STATUS BAR ---
        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        self.progress_bar.hide()
        self.statusBar().addPermanentWidget(self.progress_bar)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()
        self._create_toolbar()

        # --- SIGNAL CONNECTIONS ---
        self.canvas.scene_stack_changed.connect(self.on_scene_stack_changed)
        self.canvas.layout_added.connect(lambda *_: self.set_modified(True))

        self.sound_list.set_records(self.catalog.records())
        self.on_scene_stack_changed(self.canvas.scene_names())
        self.update_window_title()

    def _create_actions(self) -> None:
        # File Actions
        self.act_new = QAction("New Project", self)
        self.act_new.triggered.connect(self.on_file_new)

        self.act_open = QAction("Open Project...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_save = QAction("Save Project", self)
        self.act_save.setShortcut("Ctrl+S")
        self.act_save.triggered.connect(self.on_file_save)

        self.act_save_as = QAction("Save Project As...", self)
        self.act_save_as.setShortcut("Ctrl+Shift+S")
        self.act_save_as.triggered.connect(self.on_file_save_as)

        self.act_import = QAction("Import Sound Folder...", self)
        self.act_import.triggered.connect(self.on_import_folder)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        # Layout Actions
        self.act_save_layout = QAction("Save View as Layout...", self)
        self.act_save_layout.triggered.connect(self.on_save_view_as_layout)

        self.act_load_layout = QAction("Load Layout...", self)
        self.act_load_layout.triggered.connect(self.on_load_layout)

        # Tile Actions
        self.act_add_playlist = QAction("Add Playlist Tile", self)
        self.act_add_playlist.triggered.connect(self.on_add_playlist_tile)

        self.act_add_nested = QAction("Add Nested Tile", self)
        self.act_add_nested.triggered.connect(self.on_add_nested_tile)

        self.act_group = QAction("Group Selected Tiles...", self)
        self.act_group.setShortcut("Ctrl+G")
        self.act_group.triggered.connect(self.on_group_selected_tiles)

        self.act_back = QAction("Back", self)
        self.act_back.setShortcut("Backspace")
        self.act_back.triggered.connect(self.canvas.pop_scene)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_new)
        file_menu.addSeparator()
        file_menu.addAction(self.act_open)
        file_menu.addSeparator()
        file_menu.addAction(self.act_save)
        file_menu.addAction(self.act_save_as)
        file_menu.addSeparator()
        file_menu.addAction(self.act_import)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        layout_menu = menu_bar.addMenu("&Layout")
        layout_menu.addAction(self.act_save_layout)
        layout_menu.addAction(self.act_load_layout)

        tiles_menu = menu_bar.addMenu("&Tiles")
        tiles_menu.addAction(self.act_add_playlist)
        tiles_menu.addAction(self.act_add_nested)
        tiles_menu.addSeparator()
        tiles_menu.addAction(self.act_group)

    def _create_toolbar(self) -> None:
        toolbar = QToolBar("Navigation", self)
        toolbar.addAction(self.act_back)
        self.breadcrumb = QLabel()
        toolbar.addWidget(self.breadcrumb)
        self.addToolBar(toolbar)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        """Updates the window title based on filename and dirty state."""
        filename = self.filepath if self.filepath else "Untitled"
        title = f"{VISIBLE_APP_NAME} - [{os.path.basename(filename)}"
        if self.is_modified:
            title += "*"
        title += "]"
        self.setWindowTitle(title)

    def set_modified(self, modified: bool) -> None:
        """Sets the dirty flag and updates title if changed."""
        if self.is_modified != modified:
            self.is_modified = modified
            self.update_window_title()

    def on_scene_stack_changed(self, names: List[str]) -> None:
        self.breadcrumb.setText("  " + " > ".join(n or "(unnamed)" for n in names))
        self.act_back.setEnabled(len(names) > 1)

    def on_import_progress(self, value: int) -> None:
        if value != 100:
            if self.progress_bar.isHidden():
                self.progress_bar.show()
        else:
            self.progress_bar.hide()
        self.progress_bar.setValue(value)

    # --- TILE SLOTS ---

    def on_add_playlist_tile(self) -> None:
        self.canvas.add_playlist_tile()
        self.set_modified(True)

    def on_add_nested_tile(self) -> None:
        name, ok = QInputDialog.getText(self, "Add Nested Tile", "Name:")
        if ok:
            self.canvas.add_nested_tile(name=name)
            self.set_modified(True)

    def on_group_selected_tiles(self) -> None:
        if not self.canvas.selected_tiles():
            self.statusBar().showMessage("Select tiles first (Ctrl+click or drag a rubber band).", 5000)
            return
        name, ok = QInputDialog.getText(self, "Group Selected Tiles", "Name:")
        if ok and self.canvas.group_selected_tiles(name) is not None:
            self.set_modified(True)

    # --- LAYOUT SLOTS ---

    def on_save_view_as_layout(self) -> None:
        name, ok = QInputDialog.getText(self, "Save View as Layout", "Layout Name:")
        if not ok or not name:
            return
        if self.canvas.has_layout(name):
            reply = QMessageBox.question(
                self,
                "Layout exists",
                f"Layout '{name}' already exists. Do you want to override the layout definition?",
                QMessageBox.Yes | QMessageBox.No
            )
            if reply != QMessageBox.Yes:
                return
        self.canvas.store_as_layout(name)

    def on_load_layout(self) -> None:
        layouts = self.canvas.layout_names()
        if not layouts:
            QMessageBox.information(
                self, "Load Layout",
                "No layouts defined on view. Create some using 'Layout' > 'Save View as Layout'."
            )
            return
        name, ok = QInputDialog.getItem(self, "Load Layout", "Layouts", layouts, 0, False)
        if not ok or not name:
            return
        if self.canvas.load_layout(name):
            self.set_modified(True)
        else:
            QMessageBox.critical(self, "Error", f"Layout '{name}' could not be loaded.")

    # --- FILE SLOTS ---

    def on_file_new(self) -> None:
        if not self._confirm_discard():
            return
        self.canvas.clear()
        self.catalog.clear()
        self.sound_list.set_records([])
        self.filepath = None
        self.is_modified = False
        self.update_window_title()

    def on_import_folder(self) -> None:
        folder = QFileDialog.getExistingDirectory(self, "Import Sound Folder", DEFAULT_PROJECT_PATH)
        if not folder:
            return
        try:
            added = self.catalog.import_folder(folder, progress=self.on_import_progress)
        except OSError as e:
            QMessageBox.critical(self, "Error", f"Could not import folder:\n{e}")
            return
        self.sound_list.set_records(self.catalog.records())
        self.statusBar().showMessage(f"Imported {added} sound files.", 5000)
        if added:
            self.set_modified(True)

    def on_file_open(self) -> None:
        if not self._confirm_discard():
            return
        fname, _ = QFileDialog.getOpenFileName(
            self, "Open Project", DEFAULT_PROJECT_PATH, PROJECT_FILE_FILTER
        )
        if fname:
            try:
                ProjectIO.load_project(self.canvas, self.catalog, fname)
                self.filepath = fname
                self.is_modified = False
                self.update_window_title()
            except Exception as e:
                QMessageBox.critical(self, "Error", f"The selected file could not be opened:\n{e}")
            self.sound_list.set_records(self.catalog.records())

    def on_file_save(self) -> None:
        if self.filepath:
            try:
                ProjectIO.save_project(self.canvas, self.catalog, self.filepath)
                self.set_modified(False)
            except Exception as e:
                QMessageBox.critical(self, "Error", f"Could not save the project:\n{e}")
        else:
            self.on_file_save_as()

    def on_file_save_as(self) -> None:
        fname, _ = QFileDialog.getSaveFileName(
            self, "Save Project", DEFAULT_PROJECT_PATH, PROJECT_FILE_FILTER
        )
        if fname:
            # Ensure extension
            if not fname.endswith(".json"):
                fname += ".json"

            try:
                ProjectIO.save_project(self.canvas, self.catalog, fname)
                self.filepath = fname
                self.is_modified = False
                self.update_window_title()
            except Exception as e:
                QMessageBox.critical(self, "Error", f"Could not save the project:\n{e}")

    def _confirm_discard(self) -> bool:
        if not self.is_modified:
            return True
        reply = QMessageBox.question(
            self,
            "Discard changes?",
            "All unsaved work will be lost. Do you want to continue?",
            QMessageBox.Yes | QMessageBox.No
        )
        return reply == QMessageBox.Yes

    def closeEvent(self, event, /) -> None:
        """Handle window close event to prompt for saving if modified."""
        if self.is_modified:
            reply = QMessageBox.question(
                self,
                "Save changes?",
                "The project was modified. Do you want to save your changes before exiting?",
                QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel
            )

            if reply == QMessageBox.Save:
                self.on_file_save()
                # If save failed (user cancelled file dialog), we abort the exit
                if not self.filepath:
                    event.ignore()
                    return
            elif reply == QMessageBox.Cancel:
                event.ignore()
                return

        self.canvas.clear()
        event.accept()
