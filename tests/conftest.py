import pytest

from astrosolve.catalog import load_catalog
from astrosolve.pipeline import Resolver
from astrosolve.solver import FormulaSolver


@pytest.fixture(scope="session")
def catalog():
    return load_catalog()


@pytest.fixture(scope="session")
def solver(catalog):
    return FormulaSolver(catalog)


@pytest.fixture(scope="session")
def resolver(catalog, solver):
    return Resolver(catalog, solver)
