import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--runsim",
        action="store_true",
        default=False,
        help="run tests that need an HDL simulator and FMUL_RTL set",
    )
    parser.addoption(
        "--runlarge",
        action="store_true",
        default=False,
        help="run tests that need large compute, these are not run by default in our CI",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "sim: needs an HDL simulator")
    config.addinivalue_line("markers", "large: long running sweep")


def pytest_collection_modifyitems(config, items):
    skip_sim = pytest.mark.skip(reason="need --runsim option to run")
    skip_large = pytest.mark.skip(reason="need --runlarge option to run")
    for item in items:
        if "sim" in item.keywords and not config.getoption("--runsim"):
            item.add_marker(skip_sim)
        if "large" in item.keywords and not config.getoption("--runlarge"):
            item.add_marker(skip_large)
