import logging 
LOGGER = logging.getLogger(__name__)


from assistable.node.config import Config, PollPolicy
from assistable.node.cache import node_cache_clear
import os
import pytest


class TestConfig:

  @pytest.fixture
  def setup(self):
    yield
    node_cache_clear()

  def test_get_config(self, setup):
    config = Config.config()
    config_id = id(config)
    assert config is not None
    config2 = Config.config()
    assert config2 is not None
    config2_id = id(config2)
    assert config_id == config2_id

  def test_image_cache_dir(self, setup, monkeypatch, tmp_path):
    monkeypatch.setenv('ASSISTABLE_HOME', str(tmp_path))
    cache_dir = Config.config().get_image_cache_dir()
    assert cache_dir == os.path.join(str(tmp_path), '.assistable', 'openai-assistant')

  def test_openai_base_url_strips_slash(self, setup, monkeypatch):
    monkeypatch.setenv('OPENAI_BASE_URL', 'http://localhost:9999/v1/')
    assert Config.config().get_openai_base_url() == 'http://localhost:9999/v1'

  def test_default_poll_policy(self, setup, monkeypatch):
    for name in ['ASSISTANT_POLL_INTERVAL', 'ASSISTANT_POLL_MAX_INTERVAL', 'ASSISTANT_POLL_BACKOFF',
                 'ASSISTANT_RUN_TIMEOUT', 'ASSISTANT_MAX_IDLE_ACTIONS']:
      monkeypatch.delenv(name, raising=False)
    policy = Config.config().get_poll_policy()
    assert policy == PollPolicy()
    assert policy.interval == 0.5

  def test_poll_policy_from_env(self, setup, monkeypatch):
    monkeypatch.setenv('ASSISTANT_POLL_INTERVAL', '1')
    monkeypatch.setenv('ASSISTANT_MAX_IDLE_ACTIONS', '3')
    policy = Config.config().get_poll_policy()
    assert policy.interval == 1.0
    assert policy.max_idle_actions == 3

  def test_next_interval_is_capped(self):
    policy = PollPolicy(interval=1.0, max_interval=3.0, backoff=2.0)
    assert policy.next_interval(1.0) == 2.0
    assert policy.next_interval(2.0) == 3.0
    assert policy.next_interval(3.0) == 3.0
