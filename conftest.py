import pytest
import jax
import sys

@pytest.fixture(autouse=True)
def clean_jcloud_imports():
    yield
    keys_to_delete = {key for key in sys.modules if key == "jcloud" or key.startswith("jcloud.")}
    for key in keys_to_delete:
        del sys.modules[key]

@pytest.fixture
def x64():
    jax.config.update("jax_enable_x64", True)
    yield
    jax.config.update("jax_enable_x64", False)
