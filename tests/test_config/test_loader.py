"""YAML 配置加载测试"""

import pytest

from blogtree.config import AppSettings, ConfigLoader, load_yaml_config

YAML_CONTENT = """
app_name: "测试博客"
debug: true
database:
  url: "sqlite:///:memory:"
tree:
  order_step: 5
"""


@pytest.fixture(autouse=True)
def clear_cache():
    ConfigLoader.clear_cache()
    yield
    ConfigLoader.clear_cache()


class TestConfigLoader:

    def test_load_and_cache(self, temp_file):
        path = temp_file("settings.yaml", YAML_CONTENT)
        config = ConfigLoader.load(path)
        assert config["tree"]["order_step"] == 5
        assert path in ConfigLoader.get_cached_paths()
        assert ConfigLoader.load(path) is config

    def test_reload_reads_file_again(self, temp_file):
        path = temp_file("reload.yaml", "debug: false\n")
        ConfigLoader.load(path)
        temp_file("reload.yaml", "debug: true\n")
        assert ConfigLoader.reload(path)["debug"] is True

    def test_relative_path_with_base_dir(self, temp_dir, temp_file):
        temp_file("conf/app.yaml", "app_name: x\n")
        assert ConfigLoader.load("conf/app.yaml", base_dir=temp_dir)["app_name"] == "x"

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load("missing.yaml", base_dir=temp_dir)

    def test_empty_file(self, temp_file):
        assert ConfigLoader.load(temp_file("empty.yaml", "")) == {}


class TestLoadYamlConfig:

    def test_build_settings(self, temp_file):
        settings = load_yaml_config(temp_file("app.yaml", YAML_CONTENT), AppSettings)
        assert settings.app_name == "测试博客"
        assert settings.debug is True
        assert settings.tree.order_step == 5
        assert settings.database.url == "sqlite:///:memory:"

    def test_overrides_do_not_pollute_cache(self, temp_file):
        path = temp_file("override.yaml", YAML_CONTENT)
        settings = load_yaml_config(path, AppSettings, debug=False)
        assert settings.debug is False
        assert ConfigLoader.load(path)["debug"] is True

    def test_load_section(self, temp_file):
        path = temp_file("section.yaml", YAML_CONTENT)
        assert ConfigLoader.load_section(path, "tree") == {"order_step": 5}
        assert ConfigLoader.load_section(path, "logging") == {}
