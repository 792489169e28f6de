"""Reading and writing PRI resource index files and their sections."""