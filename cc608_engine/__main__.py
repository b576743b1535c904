"""Package entry point for ``python -m cc608_engine``.

Delegates to the CLI's main(). The API server has its own ``cc608-api``
console script.
"""

from cc608_engine.cli import main

if __name__ == "__main__":
    main()
