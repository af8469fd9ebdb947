import logging


def run(seed=None):
    # ---------------------------
    # LAZY IMPORTS
    # ---------------------------
    from spelunkgen.config import get_logger, LEVEL_WIDTH, LEVEL_HEIGHT
    from spelunkgen.level import LevelConfig, LevelGenerator, MajorityRule

    logger = get_logger(__name__)
    logger.info("=" * 60)
    logger.info("Level generation started")

    config = LevelConfig(width=LEVEL_WIDTH, height=LEVEL_HEIGHT, seed=seed)
    generator = LevelGenerator(config)
    generator.generate(MajorityRule())

    path = generator.save()
    logger.info(f"Level written to {path}")
    return generator


# ------------------------ # ENTRY POINT # ------------------------

if __name__ == "__main__":
    from spelunkgen.config import get_project_root, setup_logging

    # Initialize logging first
    project_root = get_project_root()
    logger = setup_logging(project_root, level=logging.INFO)
    logger.info(f"Project root: {project_root}")

    try:
        run()
    except Exception as e:
        logger.critical(f"Critical error in main: {e}", exc_info=True)
        raise
    finally:
        logger.info("Generator terminated")
        logger.info("=" * 60)
