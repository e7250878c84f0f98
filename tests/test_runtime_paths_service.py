import os

from jsonlens.core import constants as app_constants
from jsonlens.services.runtime_paths_service import preferences_paths, runtime_data_dir

HOME = os.path.abspath(os.path.expanduser("~"))


def test_xdg_state_home(tmp_path):
    target = runtime_data_dir(platform_name="linux", env={"XDG_STATE_HOME": str(tmp_path)})
    assert target == os.path.join(str(tmp_path), app_constants.RUNTIME_DIR_NAME)
    assert not os.path.exists(target)


def test_create(tmp_path):
    target = runtime_data_dir(create=True, platform_name="linux", env={"XDG_STATE_HOME": str(tmp_path)})
    assert os.path.isdir(target)


def test_default_linux_base():
    target = runtime_data_dir(platform_name="linux", env={})
    assert target.endswith(os.path.join(".local", "state", app_constants.RUNTIME_DIR_NAME))


def test_windows_base_must_stay_under_home():
    inside = os.path.join(HOME, "AppData", "Local")
    assert runtime_data_dir(platform_name="win32", env={"LOCALAPPDATA": inside}) == os.path.join(
        inside, app_constants.RUNTIME_DIR_NAME
    )
    outside = os.path.dirname(HOME) if os.path.dirname(HOME) != HOME else "/elsewhere"
    assert runtime_data_dir(platform_name="win32", env={"LOCALAPPDATA": outside}) == os.path.join(
        HOME, app_constants.RUNTIME_DIR_NAME
    )


def test_preferences_paths_order(tmp_path):
    paths = preferences_paths(str(tmp_path))
    assert paths[0] == os.path.join(str(tmp_path), app_constants.PREFERENCES_FILENAME)
    assert paths[1] == os.path.join(HOME, app_constants.LEGACY_PREFERENCES_FILENAME)
