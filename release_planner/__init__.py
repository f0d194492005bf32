"""Changeset-driven release orchestration for pnpm monorepos."""
