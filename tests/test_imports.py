"""
Basic test to verify all imports work.
"""


def test_imports():
    """Test that all backend modules can be imported."""
    from analysis.axis_selector import compute_labels
    from analysis.domain import calculate_domain
    from core.dataset import DatasetSnapshot, Field
    from data_io.catalog import extract_resources
    from data_io.ingestor import DataIngestor
    from execution.engine import ChartEngine
    from formatting.chart import ChartFormatter
    from ipc_handler import IPCHandler
    from logging_config import setup_logging

    assert callable(compute_labels)
    assert callable(calculate_domain)
    assert callable(extract_resources)
    assert callable(setup_logging)
    assert DatasetSnapshot and Field and DataIngestor and ChartEngine and ChartFormatter and IPCHandler

    import chardet
    import numpy as np
    import pandas as pd
    import pydantic
    import dotenv

    assert pd.__version__
    assert np.__version__
    assert pydantic.VERSION.startswith("2")
    assert chardet and dotenv
