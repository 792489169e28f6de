"""MSIX package parts: manifest, content types and block map."""