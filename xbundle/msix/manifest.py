"""The ``AppxManifest.xml`` part of an app package."""

from __future__ import annotations

import enum
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

NAMESPACE = "http://schemas.microsoft.com/appx/manifest/foundation/windows10"
UAP_NAMESPACE = "http://schemas.microsoft.com/appx/manifest/uap/windows10"
RESCAP_NAMESPACE = (
    "http://schemas.microsoft.com/appx/manifest/foundation/windows10/restrictedcapabilities"
)


def element_to_string(element: ET.Element) -> str:
    """Serialize an element; empty elements are written with explicit end tags."""
    return ET.tostring(element, encoding="unicode", short_empty_elements=False)


def _attributes(pairs: list[tuple[str, str | None]]) -> dict[str, str]:
    return {name: value for name, value in pairs if value is not None}


@dataclass
class Identity:
    name: str | None = None
    version: str | None = None
    publisher: str | None = None
    processor_architecture: str | None = None

    def _element(self) -> ET.Element:
        return ET.Element(
            "Identity",
            _attributes(
                [
                    ("Name", self.name),
                    ("Version", self.version),
                    ("Publisher", self.publisher),
                    ("ProcessorArchitecture", self.processor_architecture),
                ]
            ),
        )


@dataclass
class Properties:
    display_name: str | None = None
    publisher_display_name: str | None = None
    logo: str | None = None
    description: str | None = None

    def to_element(self) -> ET.Element:
        """Build the ``Properties`` element; each property is a child element."""
        root = ET.Element("Properties")
        for tag, value in (
            ("DisplayName", self.display_name),
            ("PublisherDisplayName", self.publisher_display_name),
            ("Logo", self.logo),
            ("Description", self.description),
        ):
            if value is not None:
                ET.SubElement(root, tag).text = value
        return root


@dataclass
class Resource:
    language: str


@dataclass
class TargetDeviceFamily:
    name: str = "Windows.Desktop"
    min_version: str = "10.0.0.0"
    max_version: str = "10.0.20348.0"


class CapabilityKind(enum.Enum):
    """Kinds of capability, valued by their configuration names."""

    CAPABILITY = "capability"
    RESTRICTED = "restricted"
    DEVICE = "device"

    @property
    def tag(self) -> str:
        """The manifest element name of this kind."""
        return _CAPABILITY_TAGS[self]


_CAPABILITY_TAGS = {
    CapabilityKind.CAPABILITY: "Capability",
    CapabilityKind.RESTRICTED: "rescap:Capability",
    CapabilityKind.DEVICE: "DeviceCapability",
}


@dataclass
class Capability:
    kind: CapabilityKind
    name: str


@dataclass
class ShowOn:
    tile: str


@dataclass
class DefaultTile:
    short_name: str | None = None
    logo_71x71: str | None = None
    logo_310x310: str | None = None
    logo_310x150: str | None = None
    show_on: list[ShowOn] = field(default_factory=list)

    def _element(self) -> ET.Element:
        tile = ET.Element(
            "uap:DefaultTile",
            _attributes(
                [
                    ("ShortName", self.short_name),
                    ("Square71x71Logo", self.logo_71x71),
                    ("Square310x310Logo", self.logo_310x310),
                    ("Wide310x150Logo", self.logo_310x150),
                ]
            ),
        )
        names = ET.SubElement(tile, "uap:ShowNameOnTiles")
        for show_on in self.show_on:
            ET.SubElement(names, "uap:ShowOn", {"Tile": show_on.tile})
        return tile


@dataclass
class SplashScreen:
    image: str = ""


@dataclass
class LockScreen:
    badge_logo: str = ""
    notification: str = ""


@dataclass
class VisualElements:
    background_color: str | None = None
    display_name: str | None = None
    description: str | None = None
    logo_150x150: str | None = None
    logo_44x44: str | None = None
    default_tile: DefaultTile | None = None
    splash_screen: SplashScreen | None = None
    lock_screen: LockScreen | None = None

    def _element(self) -> ET.Element:
        visual = ET.Element(
            "uap:VisualElements",
            _attributes(
                [
                    ("BackgroundColor", self.background_color),
                    ("DisplayName", self.display_name),
                    ("Description", self.description),
                    ("Square150x150Logo", self.logo_150x150),
                    ("Square44x44Logo", self.logo_44x44),
                ]
            ),
        )
        if self.default_tile is not None:
            visual.append(self.default_tile._element())
        if self.splash_screen is not None:
            ET.SubElement(visual, "uap:SplashScreen", {"Image": self.splash_screen.image})
        if self.lock_screen is not None:
            ET.SubElement(
                visual,
                "uap:LockScreen",
                {
                    "BadgeLogo": self.lock_screen.badge_logo,
                    "Notification": self.lock_screen.notification,
                },
            )
        return visual


@dataclass
class Application:
    id: str | None = None
    executable: str | None = None
    entry_point: str | None = None
    visual_elements: VisualElements = field(default_factory=VisualElements)

    def _element(self) -> ET.Element:
        app = ET.Element(
            "Application",
            _attributes(
                [
                    ("Id", self.id),
                    ("Executable", self.executable),
                    ("EntryPoint", self.entry_point),
                ]
            ),
        )
        app.append(self.visual_elements._element())
        return app


@dataclass
class AppxManifest:
    """The package manifest: identity, properties, capabilities and applications."""

    identity: Identity = field(default_factory=Identity)
    properties: Properties = field(default_factory=Properties)
    resources: list[Resource] = field(default_factory=list)
    target_device_families: list[TargetDeviceFamily] = field(default_factory=list)
    capabilities: list[Capability] = field(default_factory=list)
    applications: list[Application] = field(default_factory=list)
    namespace: str = NAMESPACE
    uap_namespace: str = UAP_NAMESPACE
    rescap_namespace: str = RESCAP_NAMESPACE

    def to_element(self) -> ET.Element:
        """Build the ``Package`` element tree."""
        root = ET.Element(
            "Package",
            {
                "xmlns": self.namespace,
                "xmlns:uap": self.uap_namespace,
                "xmlns:rescap": self.rescap_namespace,
            },
        )
        root.append(self.identity._element())
        root.append(self.properties.to_element())
        resources = ET.SubElement(root, "Resources")
        for resource in self.resources:
            ET.SubElement(resources, "Resource", {"Language": resource.language})
        dependencies = ET.SubElement(root, "Dependencies")
        for family in self.target_device_families:
            ET.SubElement(
                dependencies,
                "TargetDeviceFamily",
                {
                    "Name": family.name,
                    "MinVersion": family.min_version,
                    "MaxVersionTested": family.max_version,
                },
            )
        capabilities = ET.SubElement(root, "Capabilities")
        for capability in self.capabilities:
            ET.SubElement(capabilities, capability.kind.tag, {"Name": capability.name})
        applications = ET.SubElement(root, "Applications")
        for application in self.applications:
            applications.append(application._element())
        return root

    def to_xml(self, standalone: bool = True) -> bytes:
        """Render the manifest, with an XML declaration, as UTF-8 bytes."""
        flag = "yes" if standalone else "no"
        declaration = f'<?xml version="1.0" encoding="UTF-8" standalone="{flag}"?>'
        return (declaration + element_to_string(self.to_element())).encode("utf-8")