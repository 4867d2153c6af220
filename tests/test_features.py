"""
Tests for feature resolution — dependency order, cycles, dependency-flagged bundles.
"""

import pytest

from karinstall.core.errors import CircularDependencyError
from karinstall.core.models.features import Bundle, ConfigFile, Dependency, Feature
from karinstall.core.services.features import (
    bundle_start_level,
    resolve_feature,
    startup_location,
)


def _feature(name: str, *bundles: str, deps=(), version: str = "1.0", **kw) -> Feature:
    return Feature(
        name=name,
        version=version,
        bundles=[Bundle(location=b) for b in bundles],
        dependencies=[Dependency(name=d) if isinstance(d, str) else d for d in deps],
        **kw,
    )


def _register(ctx, *features: Feature) -> None:
    for f in features:
        ctx.features.register(f, False)


class TestResolveFeature:
    def test_dependencies_first(self, make_context, publish):
        publish("mvn:g/app/1.0")
        publish("mvn:g/lib/1.0")
        lib = _feature("lib", "mvn:g/lib/1.0")
        app = _feature("app", "mvn:g/app/1.0", deps=["lib"])
        ctx = make_context()
        _register(ctx, app, lib)  # declaration order must not matter

        resolve_feature(app, ctx)
        assert ctx.stats.installed == ["g/lib/1.0/lib-1.0.jar", "g/app/1.0/app-1.0.jar"]

    def test_config_files_installed(self, make_context, publish):
        publish("mvn:g/app/1.0/cfg", "key=value\n")
        feature = _feature("app", config_files=[ConfigFile(location="mvn:g/app/1.0/cfg")])
        ctx = make_context()
        resolve_feature(feature, ctx)
        assert ctx.system.path_for("g/app/1.0/app-1.0.cfg").read_text() == "key=value\n"

    def test_wrapped_bundle(self, make_context, publish):
        publish("mvn:g/legacy/0.9")
        ctx = make_context()
        resolve_feature(_feature("f", "wrap:mvn:g/legacy/0.9$Bundle-Version=0.9"), ctx)
        assert ctx.system.contains("g/legacy/0.9/legacy-0.9.jar")

    def test_shared_dependency_resolved_once(self, make_context, publish):
        publish("mvn:g/lib/1.0")
        lib = _feature("lib", "mvn:g/lib/1.0")
        a = _feature("a", deps=["lib"])
        b = _feature("b", deps=["lib"])
        ctx = make_context()
        _register(ctx, lib, a, b)
        resolve_feature(a, ctx)
        resolve_feature(b, ctx)
        assert ctx.completed == {a.key, b.key, lib.key}
        assert ctx.stats.installed == ["g/lib/1.0/lib-1.0.jar"]

    def test_versioned_dependency(self, make_context, publish):
        publish("mvn:g/http/1.0")
        publish("mvn:g/http/2.0")
        http1 = _feature("http", "mvn:g/http/1.0", version="1.0")
        http2 = _feature("http", "mvn:g/http/2.0", version="2.0")
        web = _feature("web", deps=[Dependency(name="http", version="2.0")])
        ctx = make_context()
        _register(ctx, http1, http2, web)
        resolve_feature(web, ctx)
        assert ctx.stats.installed == ["g/http/2.0/http-2.0.jar"]

    def test_ranged_dependency(self, make_context, publish):
        publish("mvn:g/lib/1.2")
        publish("mvn:g/lib/2.0")
        ctx = make_context()
        _register(
            ctx,
            _feature("lib", "mvn:g/lib/1.2", version="1.2"),
            _feature("lib", "mvn:g/lib/2.0", version="2.0"),
        )
        resolve_feature(_feature("app", deps=[Dependency(name="lib", version="[1,2)")]), ctx)
        assert ctx.stats.installed == ["g/lib/1.2/lib-1.2.jar"]
        assert ctx.stats.warnings == []

    def test_no_fitting_version_falls_back_to_name(self, make_context, publish):
        publish("mvn:g/lib/3.1")
        ctx = make_context()
        _register(ctx, _feature("lib", "mvn:g/lib/3.1", version="3.1"))
        resolve_feature(_feature("app", deps=[Dependency(name="lib", version="[1,2)")]), ctx)
        assert ctx.stats.installed == ["g/lib/3.1/lib-3.1.jar"]

    def test_unversioned_dependency_matches_all_versions(self, make_context, publish):
        publish("mvn:g/http/1.0")
        publish("mvn:g/http/2.0")
        ctx = make_context()
        _register(
            ctx,
            _feature("http", "mvn:g/http/1.0", version="1.0"),
            _feature("http", "mvn:g/http/2.0", version="2.0"),
        )
        resolve_feature(_feature("web", deps=["http"]), ctx)
        assert len(ctx.stats.installed) == 2

    def test_unknown_dependency_warns(self, make_context, caplog):
        ctx = make_context()
        resolve_feature(_feature("web", deps=["ghost"]), ctx)
        assert "ghost" in caplog.text
        assert ctx.stats.warnings == ["web/1.0: unknown dependency ghost"]


class TestCircularDependency:
    def test_two_feature_cycle(self, make_context):
        a = _feature("a", deps=["b"])
        b = _feature("b", deps=["a"])
        ctx = make_context()
        _register(ctx, a, b)
        with pytest.raises(CircularDependencyError) as exc:
            resolve_feature(a, ctx)
        assert exc.value.chain == ["a/1.0", "b/1.0", "a/1.0"]
        assert ctx.resolving == []

    def test_self_dependency(self, make_context):
        a = _feature("a", deps=["a"])
        ctx = make_context()
        _register(ctx, a)
        with pytest.raises(CircularDependencyError, match="a/1.0 -> a/1.0"):
            resolve_feature(a, ctx)


class TestDependencyFlag:
    def _flagged(self) -> Feature:
        return Feature(
            name="f",
            version="1.0",
            bundles=[
                Bundle(location="mvn:g/main/1.0"),
                Bundle(location="mvn:g/dep/1.0", dependency=True),
            ],
        )

    def test_flag_ignored_by_default(self, make_context, publish):
        publish("mvn:g/main/1.0")
        publish("mvn:g/dep/1.0")
        ctx = make_context()
        resolve_feature(self._flagged(), ctx)
        assert ctx.system.contains("g/dep/1.0/dep-1.0.jar")

    def test_flagged_bundles_skipped(self, make_context, make_settings, publish):
        publish("mvn:g/main/1.0")
        ctx = make_context(settings=make_settings(ignore_dependency_flag=False))
        resolve_feature(self._flagged(), ctx)
        assert ctx.system.contains("g/main/1.0/main-1.0.jar")
        assert not ctx.system.contains("g/dep/1.0/dep-1.0.jar")
        assert ctx.stats.skipped_bundles == ["mvn:g/dep/1.0"]


class TestStartupHelpers:
    def test_default_start_level(self, make_context, make_settings):
        ctx = make_context(settings=make_settings(default_start_level=45))
        assert bundle_start_level(Bundle(location="mvn:g/a/1"), ctx) == 45
        assert bundle_start_level(Bundle(location="mvn:g/a/1", start_level=10), ctx) == 10

    def test_startup_location(self, make_context):
        ctx = make_context()
        assert startup_location(Bundle(location="wrap:mvn:g/a/1.0"), ctx) == "g/a/1.0/a-1.0.jar"
        assert startup_location(Bundle(location="file:/opt/x.jar"), ctx) == "file:/opt/x.jar"


class TestDependencyVersion:
    @pytest.mark.parametrize("wanted, version, expected", [
        (None, "4.2", True),
        ("0.0.0", "4.2", True),
        ("2.0", "2.0.0", True),
        ("2.0", "2.1", False),
        ("[1,2)", "1.0", True),
        ("[1,2)", "1.9.9", True),
        ("[1,2)", "2.0", False),
        ("(1,2]", "1.0", False),
        ("(1,2]", "2.0", True),
        ("[1.5,)", "7.0", True),
        ("[1,2)", "1.4.0-SNAPSHOT", True),
    ])
    def test_accepts(self, wanted, version, expected):
        assert Dependency(name="lib", version=wanted).accepts(version) is expected

    def test_matches_by_name_only(self):
        dep = Dependency(name="lib", version="[1,2)")
        assert dep.matches(Feature(name="lib", version="5.0"))
        assert not dep.matches(Feature(name="library", version="1.0"))
