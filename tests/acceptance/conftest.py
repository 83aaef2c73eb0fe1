"""
Fixtures for live acceptance tests.

These create real VPCs. They run only when TF_ACC is set, and need AWS
credentials plus a terraform binary on PATH (or TF_ACC_TERRAFORM_PATH).
"""

import pytest

from tfacc.client import client_from_settings
from tfacc.harness import pre_check
from tfacc.settings import Settings


@pytest.fixture(scope="session")
def settings():
    settings = Settings.from_env()
    if not settings.acceptance:
        pytest.skip("Acceptance tests skipped unless env 'TF_ACC' set")
    return settings


@pytest.fixture(scope="session")
def client(settings):
    return client_from_settings(settings)


@pytest.fixture
def acc_pre_check(settings, client):
    return lambda: pre_check(settings, client)
