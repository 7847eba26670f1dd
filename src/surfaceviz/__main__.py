"""Entry point for `python -m surfaceviz`."""
from surfaceviz.main import main

if __name__ == "__main__":
    main()
