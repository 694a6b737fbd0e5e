"""Run the cas-install command line tool."""

from cas_install.tool.cas_install import main

if __name__ == "__main__":
    main()
