"""Shared fixtures: hosts, a data layout and a realistic version package."""

import copy

import pytest

from rostermine.config import DataLayout
from rostermine.errors import RetryExhaustedError
from rostermine.versions.rules import Host

ASSET_INDEX = {
    "objects": {
        "icons/icon_16x16.png": {"hash": "bdf48ef6b5d0d23bbb02e17d04865216179f510a", "size": 3665},
        "minecraft/sounds/ambient/cave/cave1.ogg": {"hash": "5f1a8a0e0fd4c2a0f1f7dc8c32e1a0c0e4ab1d5e", "size": 15113},
    }
}

PACKAGE = {
    "id": "1.21",
    "type": "release",
    "mainClass": "net.minecraft.client.main.Main",
    "assetIndex": {
        "id": "17",
        "sha1": "1a2b3c4d5e6f7a8b9c0d1e2f3a4b5c6d7e8f9a0b",
        "size": 444,
        "totalSize": 18660,
        "url": "https://piston-meta.mojang.com/v1/packages/1a2b/17.json",
    },
    "assets": "17",
    "downloads": {
        "client": {
            "sha1": "0e9a07b9bb3390602f977073aa12884a4ce12431",
            "size": 26836906,
            "url": "https://piston-data.mojang.com/v1/objects/0e9a/client.jar",
        },
        "server": {
            "sha1": "450698d1863ab5180c25d7c804ef0fe6369dd1ba",
            "size": 51627615,
            "url": "https://piston-data.mojang.com/v1/objects/4506/server.jar",
        },
    },
    "libraries": [
        {
            "name": "com.mojang:brigadier:1.2.9",
            "downloads": {
                "artifact": {
                    "path": "com/mojang/brigadier/1.2.9/brigadier-1.2.9.jar",
                    "sha1": "73e324f2ee541493a5179abf367237faa782ed21",
                    "size": 79955,
                    "url": "https://libraries.minecraft.net/com/mojang/brigadier/1.2.9/brigadier-1.2.9.jar",
                }
            },
        },
        {
            "name": "org.lwjgl:lwjgl:3.3.3:natives-linux",
            "downloads": {
                "artifact": {
                    "path": "org/lwjgl/lwjgl/3.3.3/lwjgl-3.3.3-natives-linux.jar",
                    "sha1": "1713758e3660ba66e1e954396fd18126038b33c0",
                    "size": 114627,
                    "url": "https://libraries.minecraft.net/org/lwjgl/lwjgl/3.3.3/lwjgl-3.3.3-natives-linux.jar",
                }
            },
            "rules": [{"action": "allow", "os": {"name": "linux"}}],
        },
        {
            "name": "org.lwjgl:lwjgl:3.3.3:natives-windows",
            "downloads": {
                "artifact": {
                    "path": "org/lwjgl/lwjgl/3.3.3/lwjgl-3.3.3-natives-windows.jar",
                    "sha1": "e449e28b4891fc423c54c85fbc5bb0b9efece67a",
                    "size": 166106,
                    "url": "https://libraries.minecraft.net/org/lwjgl/lwjgl/3.3.3/lwjgl-3.3.3-natives-windows.jar",
                }
            },
            "rules": [{"action": "allow", "os": {"name": "windows"}}],
        },
        {
            "name": "org.lwjgl.lwjgl:lwjgl-platform:2.9.4-nightly-20150209",
            "downloads": {
                "classifiers": {
                    "natives-linux": {
                        "path": "org/lwjgl/lwjgl/lwjgl-platform/2.9.4-nightly-20150209/lwjgl-platform-2.9.4-nightly-20150209-natives-linux.jar",
                        "sha1": "931074f46c795d2f7b30ed6395df5715cfd7675b",
                        "size": 578680,
                        "url": "https://libraries.minecraft.net/org/lwjgl/lwjgl/lwjgl-platform/2.9.4-nightly-20150209/lwjgl-platform-2.9.4-nightly-20150209-natives-linux.jar",
                    },
                    "natives-windows": {
                        "path": "org/lwjgl/lwjgl/lwjgl-platform/2.9.4-nightly-20150209/lwjgl-platform-2.9.4-nightly-20150209-natives-windows.jar",
                        "sha1": "b84d5102b9dbfabfeb5e43c7e2828d98a7fc80e0",
                        "size": 613748,
                        "url": "https://libraries.minecraft.net/org/lwjgl/lwjgl/lwjgl-platform/2.9.4-nightly-20150209/lwjgl-platform-2.9.4-nightly-20150209-natives-windows.jar",
                    },
                }
            },
            "natives": {"linux": "natives-linux", "windows": "natives-windows"},
            "extract": {"exclude": ["META-INF/"]},
        },
    ],
    "logging": {
        "client": {
            "argument": "-Dlog4j.configurationFile=${path}",
            "file": {
                "id": "client-1.12.xml",
                "sha1": "bd65e7d2e3c237be76cfbef4c2405033d7f91521",
                "size": 888,
                "url": "https://piston-data.mojang.com/v1/objects/bd65/client-1.12.xml",
            },
            "type": "log4j2-xml",
        }
    },
    "arguments": {
        "game": [
            "--username", "${auth_player_name}",
            "--version", "${version_name}",
            "--gameDir", "${game_directory}",
            "--assetsDir", "${assets_root}",
            "--assetIndex", "${assets_index_name}",
            "--uuid", "${auth_uuid}",
            "--accessToken", "${auth_access_token}",
            "--userType", "${user_type}",
            "--versionType", "${version_type}",
            {
                "rules": [{"action": "allow", "features": {"is_demo_user": True}}],
                "value": "--demo",
            },
        ],
        "jvm": [
            {
                "rules": [{"action": "allow", "os": {"name": "osx"}}],
                "value": ["-XstartOnFirstThread"],
            },
            "-Djava.library.path=${natives_directory}",
            "-Dminecraft.launcher.brand=${launcher_name}",
            "-cp",
            "${classpath}",
        ],
    },
    "javaVersion": {"component": "java-runtime-delta", "majorVersion": 21},
    "releaseTime": "2024-06-13T08:24:03+00:00",
    "time": "2024-06-13T08:24:03+00:00",
    "minimumLauncherVersion": 21,
}

LEGACY_PACKAGE = {
    "id": "1.8.9",
    "type": "release",
    "mainClass": "net.minecraft.client.main.Main",
    "assets": "1.8",
    "assetIndex": {
        "id": "1.8",
        "sha1": "f6ad102bcaa53b1a58358f16e376d548d44933ec",
        "size": 78494,
        "url": "https://launchermeta.mojang.com/v1/packages/f6ad/1.8.json",
    },
    "downloads": {
        "client": {
            "sha1": "3870888a6c3d349d3771a3e9d16c9bf5e076b908",
            "size": 8461484,
            "url": "https://launcher.mojang.com/v1/objects/3870/client.jar",
        }
    },
    "libraries": [],
    "minecraftArguments": "--username ${auth_player_name} --version ${version_name} --gameDir ${game_directory} "
                          "--assetsDir ${assets_root} --assetIndex ${assets_index_name} --uuid ${auth_uuid} "
                          "--accessToken ${auth_access_token} --userProperties ${user_properties} "
                          "--userType ${user_type}",
}


class FakeHTTP:
    """Stands in for AsyncHTTPClient; unknown URLs behave like a dead network."""

    def __init__(self, documents=None):
        self.documents = dict(documents or {})
        self.requested = []

    async def get_bytes(self, url, headers=None):
        self.requested.append(url)
        if url not in self.documents:
            raise RetryExhaustedError(url, 5, "connection refused")
        data = self.documents[url]
        return data.encode('utf-8') if isinstance(data, str) else data

    async def get_text(self, url, headers=None):
        return (await self.get_bytes(url, headers)).decode('utf-8')

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        pass

    async def close(self):
        pass


@pytest.fixture
def package_data():
    return copy.deepcopy(PACKAGE)


@pytest.fixture
def legacy_package_data():
    return copy.deepcopy(LEGACY_PACKAGE)


@pytest.fixture
def asset_index_data():
    return copy.deepcopy(ASSET_INDEX)


@pytest.fixture
def linux_host():
    return Host(os="linux", arch="x64", os_version="6.8.0")


@pytest.fixture
def windows_host():
    return Host(os="windows", arch="x64", os_version="10.0")


@pytest.fixture
def osx_host():
    return Host(os="osx", arch="arm64", os_version="14.5")


@pytest.fixture
def layout(tmp_path):
    return DataLayout(tmp_path / "data")
