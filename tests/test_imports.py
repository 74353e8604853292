def test_imports():
    """
    @brief
    Verifies that all core Rotaplan modules are importable.

    @details
    Ensures package structure integrity and confirms that the generator,
    validator and dataloader packages resolve without circular imports.
    """
    import rotaplan
    import rotaplan.dataloader
    import rotaplan.generator
    import rotaplan.validator

    # --- Assert ---
    assert all([rotaplan, rotaplan.dataloader, rotaplan.generator, rotaplan.validator])
    assert rotaplan.__version__
