"""yii2nav - go-to-definition for Yii2 render() calls."""

__version__ = "0.1.0"
