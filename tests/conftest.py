"""
Pytest configuration and shared fixtures for the archetype matching tests.
"""
import os
import sys
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))

# Settings require Supabase credentials; tests never reach a real project
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-key")


# ============================================================================
# Factories
# ============================================================================

def make_archetype_row(**overrides) -> Dict[str, Any]:
    """Catalog row as returned by Supabase, with sensible defaults."""
    row = {
        "id": "arch-000",
        "name": "Test archetype",
        "gender": "masculine",
        "obesity": "Non obèse",
        "muscularity": "Normal",
        "level": "Normal",
        "morphotype": "REC",
        "morph_index": 0.0,
        "muscle_index": 0.0,
        "bmi_range": [20.0, 24.0],
        "morph_values": {"bigHips": 0.0, "pearFigure": 0.2},
        "limb_masses": {"armMass": 1.0, "thighMass": 1.1},
    }
    row.update(overrides)
    return row


def make_profile(**overrides):
    """SemanticProfile with sensible defaults."""
    from matching.models import SemanticProfile

    data = {
        "sex": "male",
        "muscularity": "Normal",
        "obesity": None,
        "level": None,
        "morphotype": None,
        "estimated_bmi": 23.0,
        "morph_index": 0.0,
        "muscle_index": 0.0,
    }
    data.update(overrides)
    return SemanticProfile(**data)


# ============================================================================
# Fixtures: Catalog Data
# ============================================================================

@pytest.fixture
def row_factory():
    """Build catalog rows: row_factory(id="x", muscularity="Musclé")."""
    return make_archetype_row


@pytest.fixture
def profile_factory():
    """Build semantic profiles: profile_factory(estimated_bmi=30.0)."""
    return make_profile


@pytest.fixture
def catalog_rows() -> List[Dict[str, Any]]:
    """Small two-gender catalog covering the BMI spectrum."""
    return [
        make_archetype_row(id="m-01", muscularity="Normal", bmi_range=[18.5, 22.0],
                           morph_index=0.0, muscle_index=0.0),
        make_archetype_row(id="m-02", muscularity="Moyen musclé", bmi_range=[21.0, 25.0],
                           morph_index=0.1, muscle_index=0.4, morphotype="TRI"),
        make_archetype_row(id="m-03", muscularity="Musclé", bmi_range=[21.0, 25.0],
                           morph_index=0.15, muscle_index=0.35, morphotype="TRI",
                           morph_values={"bigHips": 0.2, "pearFigure": 0.4},
                           limb_masses={"armMass": 1.4, "thighMass": 1.3}),
        make_archetype_row(id="m-04", muscularity="Normal costaud", bmi_range=[25.0, 30.0],
                           morph_index=0.4, muscle_index=0.8, obesity="Surpoids", level="Surpoids"),
        make_archetype_row(id="m-05", muscularity="Athlétique", bmi_range=[24.0, 28.0],
                           morph_index=0.2, muscle_index=1.2),
        make_archetype_row(id="m-06", muscularity="Atrophié sévère", bmi_range=[15.0, 18.5],
                           morph_index=-0.5, muscle_index=-0.9, level="Émacié"),
        make_archetype_row(id="m-07", muscularity="Normal", bmi_range=[27.0, 32.0],
                           morph_index=0.6, muscle_index=0.1, obesity="Surpoids", level="Surpoids"),
        make_archetype_row(id="m-08", muscularity="Normal", bmi_range=[32.0, 40.0],
                           morph_index=1.2, muscle_index=0.2, obesity="Obèse", level="Obèse"),
        make_archetype_row(id="m-bad", muscularity="Musclé", bmi_range="21-25"),
        make_archetype_row(id="f-01", gender="feminine", muscularity="Moins musclée",
                           bmi_range=[18.5, 24.0], morph_index=0.1, muscle_index=-0.2),
        make_archetype_row(id="f-02", gender="feminine", muscularity="Musclée",
                           bmi_range=[20.0, 25.0], morph_index=0.2, muscle_index=0.5),
        make_archetype_row(id="f-03", gender="feminine", muscularity="Moyennement musclée",
                           bmi_range=[22.0, 27.0], morph_index=0.3, muscle_index=0.2),
    ]


@pytest.fixture
def catalog(catalog_rows):
    """In-memory catalog over catalog_rows."""
    from matching.catalog import InMemoryArchetypeCatalog
    return InMemoryArchetypeCatalog(catalog_rows)


@pytest.fixture
def telemetry():
    """Recording telemetry sink."""
    from matching.telemetry import RecordingTelemetry
    return RecordingTelemetry()


@pytest.fixture
def selector(catalog, telemetry):
    """Selector with default config and recording telemetry."""
    from matching.selector import ArchetypeSelector
    return ArchetypeSelector(catalog, telemetry=telemetry)


# ============================================================================
# Fixtures: Mock Services
# ============================================================================

@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()
    mock_client.table.return_value.select.return_value.execute.return_value.data = []
    mock_client.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []
    return mock_client


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app():
    """FastAPI application with a fresh dependency override table."""
    from api.app import create_app
    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app, catalog):
    """Test client whose scan-match route reads the in-memory catalog."""
    from fastapi.testclient import TestClient
    from api.routes.scan_match import get_archetype_catalog

    app.dependency_overrides[get_archetype_catalog] = lambda: catalog
    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "supabase: marks tests that require Supabase")
