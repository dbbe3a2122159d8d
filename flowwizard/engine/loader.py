"""SpecLoader - loads and validates YAML form specifications."""

import logging
import yaml
from pathlib import Path
from typing import Optional
from .schema import FormSpec

logger = logging.getLogger(__name__)


class SpecLoader:
    """
    Loads form specifications from YAML files.

    Validates structure using Pydantic models.
    """

    def __init__(self, base_path: Optional[Path] = None):
        """
        Initialize loader.

        Args:
            base_path: Directory holding a forms/ folder (default: ./flowwizard)
        """
        if base_path is None:
            base_path = Path.cwd() / "flowwizard"
        self.base_path = Path(base_path)

    def load_form(self, form_name: str) -> FormSpec:
        """
        Load a form specification from YAML.

        Args:
            form_name: Name of form (e.g., 'deploy')

        Returns:
            Validated FormSpec instance

        Raises:
            FileNotFoundError: If form file doesn't exist
            ValidationError: If YAML doesn't match schema
        """
        form_path = self.base_path / "forms" / f"{form_name}.yaml"

        if not form_path.exists():
            raise FileNotFoundError(f"Form spec not found: {form_path}")

        with open(form_path, 'r') as f:
            data = yaml.safe_load(f)

        logger.debug("Loaded form spec %s", form_path)
        return FormSpec(**(data or {}))
