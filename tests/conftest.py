pytest_plugins = ["prmerge.testing.conftest"]
