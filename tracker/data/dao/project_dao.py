import json
import logging
import os

from tracker.core.config import DATA_DIR
from tracker.core.errors import ProjectStoreError

logger = logging.getLogger(__name__)

DEFAULT_PROJECTS_PATH = os.path.join(DATA_DIR, 'projects.json')


def load_projects_document(path: str = None) -> dict:
    """
    读取静态的 projects.json，返回 {"lastUpdated", "projects", "metadata"?}
    A bare JSON list is accepted and wrapped as {"projects": [...]}.
    """
    target_path = path if path else DEFAULT_PROJECTS_PATH
    try:
        with open(target_path, 'r', encoding='utf-8') as f:
            # NaN / Infinity literals become null so the served document stays valid JSON
            document = json.load(f, parse_constant=lambda name: None)
    except FileNotFoundError as e:
        raise ProjectStoreError(f"projects file not found: {target_path}") from e
    except (OSError, ValueError) as e:
        raise ProjectStoreError(f"could not read {target_path}: {e}") from e

    if isinstance(document, list):
        document = {'projects': document}
    if not isinstance(document, dict):
        raise ProjectStoreError(f"{target_path}: expected a JSON object, got {type(document).__name__}")
    if not isinstance(document.get('projects', []), list):
        raise ProjectStoreError(f"{target_path}: 'projects' must be a list")

    logger.debug("Loaded %d projects from %s", len(document.get('projects', [])), target_path)
    return document
