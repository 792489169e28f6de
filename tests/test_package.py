import pytest

from xbundle.mvn.package import Artifact, Package, Version


def test_package_file_name_and_url():
    pkg = Package("com.example.lib", "core")
    assert pkg.file_name() == "com.example.lib-core.metadata.xml"
    assert pkg.url("https://repo.example.com") == (
        "https://repo.example.com/com/example/lib/core/maven-metadata.xml"
    )
    assert str(pkg) == "com.example.lib:core"


def test_parse_full():
    assert Version.parse("1.2.3-alpha") == Version(1, 2, 3, "alpha")


def test_parse_defaults_missing_components():
    assert Version.parse("1.0") == Version(1, 0, 0, None)
    assert Version.parse("7") == Version(7, 0, 0, None)


def test_parse_ignores_extra_components():
    assert Version.parse("1.2.3.4") == Version(1, 2, 3, None)


def test_suffix_keeps_later_dashes():
    assert Version.parse("1.0-rc-1").suffix == "rc-1"


@pytest.mark.parametrize("text", ["", "a.b", "1.x", "1..2", "-1", "1.-2"])
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        Version.parse(text)


def test_parse_out_of_range():
    with pytest.raises(ValueError):
        Version.parse("4294967296")


@pytest.mark.parametrize("text", ["0.0.0", "1.2.3", "1.0.0-alpha", "10.20.30-rc1"])
def test_display_round_trip(text):
    assert str(Version.parse(text)) == text


def test_ordering_components():
    assert Version.parse("1.0") < Version.parse("1.0.1")
    assert Version.parse("1.9.9") < Version.parse("2.0")
    assert Version.parse("1.2") > Version.parse("1.1.99")


def test_suffix_sorts_before_release():
    assert Version.parse("1.0.0-alpha") < Version.parse("1.0.0")
    assert Version.parse("1.0.0-alpha") < Version.parse("1.0.0-beta")
    assert Version.parse("0.9.9") < Version.parse("1.0.0-alpha")


def test_sorted_versions():
    texts = ["2.0", "1.0.0-b", "1.0", "1.0.0-a", "0.1"]
    result = [str(v) for v in sorted(map(Version.parse, texts))]
    assert result == ["0.1.0", "1.0.0-a", "1.0.0-b", "1.0.0", "2.0.0"]


def test_lowest():
    assert Version.lowest() == Version(0, 0, 0, None)
    assert all(Version.lowest() <= Version.parse(t) for t in ["0.0.0", "0.0.1", "1.0-a"])


def test_bump_release():
    v = Version.parse("1.2.3")
    assert v.bump() == Version(1, 2, 4)
    assert v < v.bump()


def test_bump_suffixed_drops_suffix():
    v = Version.parse("1.2.3-rc")
    assert v.bump() == Version(1, 2, 3)
    assert v < v.bump()


def test_hashable_and_equal():
    assert len({Version.parse("1.0"), Version.parse("1.0.0"), Version(1)}) == 1


def test_artifact_names():
    artifact = Artifact(Package("org.example", "widget"), Version.parse("1.0-beta"))
    assert artifact.file_name("pom") == "org.example-widget-1.0.0-beta.pom"
    assert artifact.url("https://repo.example.com", "jar") == (
        "https://repo.example.com/org/example/widget/1.0.0-beta/widget-1.0.0-beta.jar"
    )
    assert str(artifact) == "org.example:widget:1.0.0-beta"