"""Tests for SpecLoader - YAML loading and validation."""

import pytest
import tempfile
import yaml
from pathlib import Path
from pydantic import ValidationError
from flowwizard.engine.loader import SpecLoader
from flowwizard.engine.schema import FormSpec


@pytest.fixture
def temp_dir():
    """Create temporary directory for test fixtures."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_form_yaml(temp_dir):
    """Create a sample form spec YAML file."""
    form_dir = temp_dir / "flowwizard" / "forms"
    form_dir.mkdir(parents=True)

    form_content = """
name: database
version: 1.0
description: Database connection settings
exit_confirmation:
  prompt: "Really exit?"
properties:
  - id: db.engine
    type: enum
    prompt: "Database engine:"
    options:
      - value: postgres
        label: "PostgreSQL"
      - value: sqlite
        label: "SQLite"
  - id: db.port
    type: integer
    prompt: "Port:"
    default_value: 5432
    show_when: "state.db.engine == postgres"
"""
    form_file = form_dir / "database.yaml"
    form_file.write_text(form_content)
    return form_file


def test_loader_load_form(temp_dir, sample_form_yaml):
    """SpecLoader can load and validate a form spec."""
    loader = SpecLoader(base_path=temp_dir / "flowwizard")

    spec = loader.load_form('database')

    assert isinstance(spec, FormSpec)
    assert spec.name == 'database'
    assert spec.version == '1.0'
    assert spec.exit_confirmation.prompt == 'Really exit?'
    assert len(spec.properties) == 2
    assert spec.properties[1].show_when == 'state.db.engine == postgres'


def test_loader_form_not_found(temp_dir):
    """SpecLoader raises error for non-existent form."""
    loader = SpecLoader(base_path=temp_dir / "flowwizard")

    with pytest.raises(FileNotFoundError) as exc_info:
        loader.load_form('nonexistent')

    assert 'nonexistent' in str(exc_info.value)


def test_loader_invalid_yaml(temp_dir):
    """SpecLoader raises error for invalid YAML."""
    form_dir = temp_dir / "flowwizard" / "forms"
    form_dir.mkdir(parents=True)
    (form_dir / "bad.yaml").write_text("invalid: yaml: content: [")

    loader = SpecLoader(base_path=temp_dir / "flowwizard")

    with pytest.raises(yaml.YAMLError):
        loader.load_form('bad')


def test_loader_missing_required_fields(temp_dir):
    """SpecLoader validates required fields are present."""
    form_dir = temp_dir / "flowwizard" / "forms"
    form_dir.mkdir(parents=True)

    # Missing 'name' field
    (form_dir / "incomplete.yaml").write_text('version: "1.0"\ndescription: Test\n')

    loader = SpecLoader(base_path=temp_dir / "flowwizard")

    with pytest.raises(ValidationError):
        loader.load_form('incomplete')


def test_bundled_deploy_form_loads():
    """The deploy form shipped with the package is valid."""
    loader = SpecLoader(base_path=Path(__file__).parent.parent / "flowwizard")

    spec = loader.load_form('deploy')

    assert spec.name == 'deploy'
    assert [p.id for p in spec.properties][:2] == ['app.name', 'app.environment']


def test_loader_rejects_enum_without_options(temp_dir):
    """A form whose enum has no options fails when loaded, not mid-run."""
    form_dir = temp_dir / "flowwizard" / "forms"
    form_dir.mkdir(parents=True)
    (form_dir / "broken.yaml").write_text(
        'name: broken\nversion: "1"\ndescription: Broken\n'
        'properties:\n  - id: env\n    type: enum\n    prompt: "Env?"\n'
    )

    loader = SpecLoader(base_path=temp_dir / "flowwizard")

    with pytest.raises(ValidationError):
        loader.load_form('broken')
