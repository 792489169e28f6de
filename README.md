# xbundle

Building blocks for application packaging tools, in three parts.

## `xbundle.pri`: PRI resource index files

`xbundle.pri.pri_file.PriFile` reads and writes PRI files. A file is an
ordered list of `Section`s; each section holds one of:

- `DataItem` (`xbundle.pri.data_item`): NUL-terminated UTF-8 strings and raw
  blobs, added with `add_string` / `add_blob` and fetched with `string` /
  `blob`.
- `PriDescriptor` (`xbundle.pri.pri_descriptor`): the indices of the other
  sections, with `PriDescriptorFlags`.
- `ResourceMap` (`xbundle.pri.resource_map`): item groups, item infos and
  `CandidateInfo` entries.
- `DecisionInfo` (`xbundle.pri.decision_info`): `Qualifier`s (typed by
  `QualifierType`), `QualifierSet`s and `Decision`s.
- `HierarchicalSchema` (`xbundle.pri.hierarchical_schema`): scope and item
  names as `ResourceMapEntry` values.
- `UnknownSection`: any other section, kept byte for byte.

`PriFile.read` accepts the `mrm_pri0`, `mrm_pri1`, `mrm_pri2` and `mrm_prif`
headers; `PriFile.write` always writes `mrm_pri2`. Malformed input raises
`ValueError` (or `EOFError` when the data ends early).

```python
from xbundle.pri.pri_file import PriFile

pri = PriFile.open("resources.pri")
for index in range(pri.num_sections()):
    print(pri.section(index))
pri.create("copy.pri")
```

## `xbundle.msix`: XML parts of an MSIX package

- `xbundle.msix.manifest.AppxManifest` builds `AppxManifest.xml` from
  `Identity`, `Properties`, `Resource`, `TargetDeviceFamily`, `Capability`
  (of a `CapabilityKind`) and `Application` values.
- `xbundle.msix.content_types.ContentTypesBuilder` collects one `DefaultRule`
  per file extension, guessing the MIME type from the extension and falling
  back to `application/octet-stream`; `finish()` returns `ContentTypes`,
  whose `to_xml` renders `[Content_Types].xml`.
- `xbundle.msix.block_map.build_block_map` (or `BlockMapBuilder`) hashes every
  entry of a `zipfile.ZipFile` in 64 KiB blocks with SHA-256 and returns an
  `AppxBlockMap`, whose `to_xml` renders `AppxBlockMap.xml`.

```python
import zipfile
from xbundle.msix.block_map import build_block_map

with zipfile.ZipFile("app.msix") as archive:
    xml = build_block_map(archive).to_xml(False)
```

## `xbundle.mvn`: Maven coordinates and version ranges

- `xbundle.mvn.package`: `Package` (group and name), `Version`
  (`major.minor.patch[-suffix]`, parsed with `Version.parse`) and `Artifact`,
  each able to give its cache file name and repository URL.
- `xbundle.mvn.range`: `parse_range` turns a Maven range specification such as
  `(,1.0],[1.2,)` into a `VersionRange`; `tokenize` and `parse` expose the
  intermediate `Token` and `Requirement` values.
- `xbundle.mvn.pom`: `Pom.from_xml` reads the packaging and dependencies of a
  `pom.xml`; `Dependency.parse` reads `group:name:version`.

```python
from xbundle.mvn.package import Version
from xbundle.mvn.range import parse_range

allowed = parse_range("[1.2,2.0)")
allowed.contains(Version.parse("1.5"))   # True
allowed.contains(Version.parse("2.0"))   # False
```

## What the package does not do

- It does not download anything and does not resolve dependency graphs: there
  is no repository client, no cache of artifacts and no solver that picks
  versions. It also does not read `maven-metadata.xml` version listings.
- It does not assemble, sign or add icons to MSIX archives; it only produces
  the XML parts and the block map from an existing zip archive.
- There is no command-line program.

## Installing

```
pip install .
```

The package uses only the standard library.

## Tests

```
pip install .[test]
pytest
```