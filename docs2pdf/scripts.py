"""
In-Page Scripts
===============
JavaScript snippets evaluated inside the rendered page via
``PageSession.evaluate(script, arg)``.

Each constant is a function expression taking a single argument (Playwright
passes one serialisable value).  Keep them small: anything that can be done
on the Python side with BeautifulSoup is done there instead.
"""

# Opens every collapsed sidebar category, waiting for the nested list to be
# rendered before descending into it.
# arg: {rootSelector: str, settleMs: int, maxWaitMs: int}
# returns: number of categories opened
EXPAND_SIDEBAR = """
async ({rootSelector, settleMs, maxWaitMs}) => {
    const sleep = (ms) => new Promise(resolve => setTimeout(resolve, ms));
    const waitForSubList = async (li) => {
        const deadline = Date.now() + maxWaitMs;
        while (Date.now() < deadline) {
            const sub = li.querySelector(':scope > ul.menu__list');
            if (sub) return sub;
            await sleep(25);
        }
        return li.querySelector(':scope > ul.menu__list');
    };
    let opened = 0;
    const expand = async (ul) => {
        for (const li of ul.querySelectorAll(':scope > li')) {
            const toggleRow = li.querySelector(':scope > div[class*="menu__list-item-collapsible"]');
            if (toggleRow) {
                const toggles = toggleRow.querySelectorAll(
                    ':scope > a[aria-expanded="false"], :scope > button[aria-expanded="false"]'
                );
                for (const toggle of toggles) {
                    toggle.click();
                    opened++;
                    await sleep(settleMs);
                }
            }
            const sub = toggleRow ? await waitForSubList(li) : li.querySelector(':scope > ul.menu__list');
            if (sub) {
                await expand(sub);
            }
        }
    };
    const root = document.querySelector(rootSelector);
    if (!root) return -1;
    await expand(root);
    return opened;
}
"""

# arg: selector of the sidebar root; returns its outer HTML or "".
SIDEBAR_HTML = """
(selector) => {
    const root = document.querySelector(selector);
    return root ? root.outerHTML : '';
}
"""

# Opens <details data-collapsed="true"> blocks by clicking their summary.
# returns: number of blocks opened
EXPAND_DETAILS = """
() => {
    let opened = 0;
    for (const details of document.querySelectorAll('details[data-collapsed="true"]')) {
        const summary = details.querySelector('summary');
        if (summary) {
            summary.click();
            opened++;
        }
    }
    return opened;
}
"""

# arg: {selector: str, id: str}; returns true if an element was stamped.
STAMP_ELEMENT_ID = """
({selector, id}) => {
    const element = document.querySelector(selector);
    if (!element) return false;
    element.id = id;
    return true;
}
"""

# arg: selector; returns the element's outer HTML with a trailing page break,
# or "" when the element does not exist.
EXTRACT_OUTER_HTML = """
(selector) => {
    const element = document.querySelector(selector);
    if (!element) return '';
    element.style.pageBreakAfter = 'always';
    return element.outerHTML;
}
"""

# arg: html; replaces the whole body of the page.
REPLACE_BODY = """
(html) => {
    document.body.innerHTML = html;
}
"""

# Predicate for page.wait_for_function: true once every <img> has finished
# loading (or failed), so images injected by REPLACE_BODY are in the PDF.
IMAGES_SETTLED = """
() => Array.from(document.images).every(img => img.complete)
"""
