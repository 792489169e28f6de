"""Maven coordinates, version ranges and POM parsing."""