import os

from yii2nav.paths import is_file_uri, path_to_uri, uri_to_path


def test_posix_uri_to_path() -> None:
    assert uri_to_path("file:///var/www/app/controllers/SiteController.php", sep="/") == (
        "/var/www/app/controllers/SiteController.php"
    )


def test_windows_drive_slash_is_dropped() -> None:
    assert uri_to_path("file:///C:/www/app/SiteController.php", sep="\\") == "C:\\www\\app\\SiteController.php"


def test_percent_encoded_drive_and_spaces() -> None:
    assert uri_to_path("file:///c%3A/My%20Sites/app.php", sep="\\") == "c:\\My Sites\\app.php"


def test_windows_path_to_uri_gets_leading_slash() -> None:
    assert path_to_uri("C:\\www\\app\\views\\site\\index.php", sep="\\") == "file:///C:/www/app/views/site/index.php"


def test_path_to_uri_encodes_spaces() -> None:
    assert path_to_uri("/home/dev/my app/index.php", sep="/") == "file:///home/dev/my%20app/index.php"


def test_round_trip_on_host() -> None:
    path = os.path.abspath(os.path.join("srv", "app", "controllers", "PostController.php"))
    assert uri_to_path(path_to_uri(path)) == path


def test_round_trip_windows_convention() -> None:
    path = "D:\\projects\\shop\\views\\cart\\index.php"
    assert uri_to_path(path_to_uri(path, sep="\\"), sep="\\") == path


def test_cross_platform_mapping_is_not_a_round_trip() -> None:
    uri = path_to_uri("/home/dev/app.php", sep="/")
    assert uri_to_path(uri, sep="\\") == "\\home\\dev\\app.php"


def test_only_file_uris_have_paths() -> None:
    assert is_file_uri("file:///var/www/app.php")
    assert not is_file_uri("untitled:Untitled-1")
    assert not is_file_uri("vscode-vfs://github/app.php")
