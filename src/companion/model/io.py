"""
Input/Output Manager (JSON)
Handles saving and loading Companion projects to .json files.
"""
from __future__ import annotations

import json
import logging
import os
from importlib.metadata import version, PackageNotFoundError
from typing import Any, Dict, TYPE_CHECKING

from companion.model.catalog import SoundFileCatalog, SoundFileRecord

if TYPE_CHECKING:
    from companion.tile.canvas import Canvas

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("companion")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


class ProjectIO:
    @staticmethod
    def to_document(canvas: Canvas, catalog: SoundFileCatalog) -> Dict[str, Any]:
        return {
            "version": APP_VERSION,
            "catalog": catalog.to_list(),
            "canvas": canvas.to_json_object(),
        }

    @staticmethod
    def save_project(canvas: Canvas, catalog: SoundFileCatalog, filepath: str) -> None:
        logger.info(f"Saving project to: {filepath}")
        doc = ProjectIO.to_document(canvas, catalog)
        try:
            folder = os.path.dirname(filepath)
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2)
            logger.info(f"Project saved to: {filepath}")
        except Exception as e:
            logger.exception(f"Failed to save project: {e}")
            raise e

    @staticmethod
    def load_project(canvas: Canvas, catalog: SoundFileCatalog, filepath: str) -> None:
        """
        Replaces catalog and canvas contents with the project stored in `filepath`.

        Raises:
            OSError: The file could not be read.
            ValueError: The file is not JSON or does not contain project data.
        """
        logger.info(f"Loading project from: {filepath}")
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                doc = json.load(f)
        except json.JSONDecodeError as e:
            msg = f"File '{filepath}' is not a valid JSON file: {e}"
            logger.error(msg)
            raise ValueError(msg) from e
        except Exception as e:
            logger.exception(f"Failed to load project: {e}")
            raise e

        ProjectIO.apply_document(canvas, catalog, doc, source=filepath)
        logger.info(f"Project loaded from: {filepath}")

    @staticmethod
    def apply_document(canvas: Canvas, catalog: SoundFileCatalog, doc: Any, source: str = "<memory>") -> None:
        if not isinstance(doc, dict) or not isinstance(doc.get("canvas"), dict):
            msg = f"'{source}' does not seem to contain valid project data."
            logger.error(msg)
            raise ValueError(msg)

        records = doc.get("catalog", [])
        try:
            if not isinstance(records, list):
                raise TypeError("'catalog' must be a list")
            parsed = [SoundFileRecord.from_dict(d) for d in records]
        except (KeyError, TypeError, ValueError) as e:
            msg = f"'{source}' contains an invalid sound file catalog: {e}"
            logger.error(msg)
            raise ValueError(msg) from e

        if doc.get("version") not in (None, APP_VERSION):
            logger.info(f"Project was written by version {doc.get('version')}, running {APP_VERSION}.")

        # import against a staged catalog; the live project is only touched on success
        staged = SoundFileCatalog()
        staged.replace_records(parsed)
        if not canvas.set_from_json_object(doc["canvas"], catalog=staged):
            msg = f"'{source}' does not seem to contain valid project data."
            logger.error(msg)
            raise ValueError(msg)

        catalog.replace_records(parsed)
        canvas.set_sound_file_model(catalog)
