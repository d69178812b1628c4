"""Tests for taskweave.core.config module."""

import pytest

from taskweave.core.config import ExecutorConfig


class TestExecutorConfig:
    """Tests for ExecutorConfig."""

    def test_defaults(self):
        """Test defaults are strict, unbounded and fail-fast without cancelling."""
        config = ExecutorConfig()

        assert config.cancel_siblings_on_failure is False
        assert config.strict_dependencies is True
        assert config.max_concurrency is None

    @pytest.mark.parametrize("limit", [0, -1])
    def test_max_concurrency_must_be_positive(self, limit):
        """Test non-positive limits are rejected."""
        with pytest.raises(ValueError, match="max_concurrency"):
            ExecutorConfig(max_concurrency=limit)

    def test_frozen(self):
        """Test configs are immutable."""
        config = ExecutorConfig()
        with pytest.raises(AttributeError):
            config.strict_dependencies = False


class TestExecutorConfigFromEnv:
    """Tests for ExecutorConfig.from_env()."""

    def test_empty_environment(self):
        """Test unset variables give defaults."""
        assert ExecutorConfig.from_env({}) == ExecutorConfig()

    def test_all_variables(self):
        """Test every variable is read."""
        config = ExecutorConfig.from_env(
            {
                "TASKWEAVE_CANCEL_SIBLINGS": "yes",
                "TASKWEAVE_STRICT_DEPENDENCIES": "off",
                "TASKWEAVE_MAX_CONCURRENCY": " 4 ",
            }
        )

        assert config == ExecutorConfig(
            cancel_siblings_on_failure=True,
            strict_dependencies=False,
            max_concurrency=4,
        )

    @pytest.mark.parametrize("raw", ["1", "TRUE", "On"])
    def test_truthy_values(self, raw):
        """Test boolean parsing is case-insensitive."""
        config = ExecutorConfig.from_env({"TASKWEAVE_CANCEL_SIBLINGS": raw})
        assert config.cancel_siblings_on_failure is True

    def test_bad_boolean(self):
        """Test unrecognised booleans raise."""
        with pytest.raises(ValueError, match="TASKWEAVE_STRICT_DEPENDENCIES"):
            ExecutorConfig.from_env({"TASKWEAVE_STRICT_DEPENDENCIES": "maybe"})

    def test_bad_integer(self):
        """Test a non-numeric limit raises."""
        with pytest.raises(ValueError, match="must be an integer"):
            ExecutorConfig.from_env({"TASKWEAVE_MAX_CONCURRENCY": "many"})

    def test_zero_limit(self):
        """Test a zero limit is rejected like the constructor does."""
        with pytest.raises(ValueError, match="positive"):
            ExecutorConfig.from_env({"TASKWEAVE_MAX_CONCURRENCY": "0"})

    def test_reads_os_environ(self, monkeypatch):
        """Test os.environ is the default source."""
        monkeypatch.setenv("TASKWEAVE_MAX_CONCURRENCY", "3")
        assert ExecutorConfig.from_env().max_concurrency == 3
