"""package-deps-admin — manage a Node package's dependencies through npm, yarn, pnpm or bun."""

__version__ = "0.1.0"
