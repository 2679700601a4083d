"""Commands and pipelines whose standard output is read as a byte stream."""