"""
Bundleman signals.

Signals:
    bundle_created:
        Sent after PricingService.create_bundle commits a parent and its children.

        Kwargs:
            sender: CatalogItem class
            instance: The parent CatalogItem
            code: str: the parent code
            children: list[CatalogItem]: the child records, in serial order

        Example handler::

            from bundleman.signals import bundle_created

            def on_bundle_created(sender, instance, code, children, **kwargs):
                logger.info("Bundle %s created with %d children", code, len(children))

            bundle_created.connect(on_bundle_created)

    combo_applied:
        Sent after PricingService.apply_combo prices a cart and counts the use.
        Quotes (count_usage=False) do not send it.

        Kwargs:
            sender: Combo class
            instance: The Combo instance
            code: str: the combo code
            applied: AppliedCombo: discount and slot breakdown

        Example handler::

            from bundleman.signals import combo_applied

            def on_combo_applied(sender, instance, code, applied, **kwargs):
                logger.info("Combo %s saved %d", code, applied.savings_amount_q)

            combo_applied.connect(on_combo_applied)
"""

from django.dispatch import Signal

bundle_created = Signal()
combo_applied = Signal()
