from pathlib import Path

import pytest

BUILD_GRADLE = """plugins {
    // Bundle non-core dependencies into a fat jar
    id("com.gradleup.shadow") version "8.3.5"
    // QuPath Gradle extension convention plugin
    id("qupath-conventions")
    // Scripting support
    groovy
}

apply(from = "create-extension.gradle.kts")

qupathExtension {
    name = "qupath-extension-template"
    group = "io.github.qupath"
    version = "0.1.0-SNAPSHOT"
    description = "A simple QuPath extension"
    automaticModule = "io.github.qupath.extension.template"
}

dependencies {
    shadow(libs.bundles.qupath)
    shadow(libs.bundles.logging)
    shadow(libs.bundles.groovy)
    testImplementation(libs.bundles.qupath)
}
"""

DEMO_EXTENSION = """package qupath.ext.template;

public class DemoExtension implements QuPathExtension {
    public String getName() {
        return "Demo extension";
    }
}
"""

DEMO_GROOVY_EXTENSION = """package qupath.ext.template

class DemoGroovyExtension implements QuPathExtension {
    String name = "Demo Groovy extension"
}
"""

SERVICES = "qupath.ext.template.DemoExtension\nqupath.ext.template.DemoGroovyExtension\n"

PNG_BYTES = b"\x89PNG\r\n\x1a\ntemplate\x00\xff"
WRAPPER_BYTES = b"PK\x03\x04template\x00\xfe"
LATIN1_BYTES = "template caf\xe9".encode("latin-1")


def _write(root: Path, relative: str, content) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    root = tmp_path / "qupath-extension-template"
    files = {
        "build.gradle.kts": BUILD_GRADLE,
        "settings.gradle.kts": 'rootProject.name = "qupath-extension-template"\n',
        "create-extension.gradle.kts": 'tasks.register("createExtension") { // template DemoExtension\n}\n',
        "README.md": "# qupath-extension-template\n\nRename DemoExtension.\n",
        "gradlew": "#!/bin/sh\n# template launcher\n",
        "gradlew.bat": "@rem template launcher\r\n",
        "gradle/wrapper/gradle-wrapper.jar": WRAPPER_BYTES,
        "gradle/wrapper/gradle-wrapper.properties": "distributionUrl=https\\://services.gradle.org/gradle-8.10-bin.zip\n",
        "src/main/java/qupath/ext/template/DemoExtension.java": DEMO_EXTENSION,
        "src/main/java/qupath/ext/template/ui/InterfaceController.java": "package qupath.ext.template.ui;\n",
        "src/main/groovy/qupath/ext/template/DemoGroovyExtension.groovy": DEMO_GROOVY_EXTENSION,
        "src/main/resources/META-INF/services/qupath.lib.gui.extensions.QuPathExtension": SERVICES,
        "src/main/resources/qupath/ext/template/ui/strings.properties": "title = Template\n",
        "src/main/resources/qupath/ext/template/ui/logo.png": PNG_BYTES,
        "src/main/resources/qupath/ext/template/notes.txt": LATIN1_BYTES,
        "src/test/java/qupath/ext/template/TemplateTest.java": "package qupath.ext.template;\n\nclass TemplateTest {}\n",
        ".git/HEAD": "ref: refs/heads/main\n",
        ".gradle/8.10/fileHashes.lock": b"\x00",
        ".idea/workspace.xml": "<project/>\n",
        "build/libs/qupath-extension-template.jar": b"PK",
        "qupath-extension-template.iml": "<module/>\n",
    }
    for relative, content in files.items():
        _write(root, relative, content)
    (root / "src" / "main" / "resources" / "empty").mkdir(parents=True)
    return root
