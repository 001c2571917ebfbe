from __future__ import annotations

import sys
from pathlib import Path
from typing import List


def streamlit_argv(extra: List[str]) -> List[str]:
    """Command line for ``streamlit run``; options such as --server.port pass through."""
    app = Path(__file__).resolve().with_name("ui_app.py")
    return ["streamlit", "run", str(app), *extra]


def main(argv: List[str] | None = None) -> int:
    try:
        from streamlit.web import cli as stcli  # type: ignore
    except ImportError:  # pragma: no cover
        print("Streamlit is not installed. Install with: pip install 'schtasker[ui]'")
        return 1

    # streamlit's click entry point parses sys.argv itself
    sys.argv = streamlit_argv(sys.argv[1:] if argv is None else argv)
    return stcli.main()  # type: ignore


if __name__ == "__main__":
    raise SystemExit(main())
